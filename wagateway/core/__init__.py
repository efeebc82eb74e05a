"""Core configuration, logging, errors and application factory for wagateway."""
