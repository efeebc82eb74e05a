"""wagateway command-line interface."""
