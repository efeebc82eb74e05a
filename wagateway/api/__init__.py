"""HTTP surface of wagateway: routes, controllers, dependencies and middleware."""
