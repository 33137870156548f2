from fastapi import FastAPI


def create_test_app(routers, middlewares=None) -> FastAPI:
    """
    Create a FastAPI test application with the given routers and middlewares.

    The application has the rate limiter installed, so routes decorated with
    ``@limiter.limit`` work exactly as they do in the real server.

    Args:
        routers: A router or a list of routers to include in the app.
        middlewares: Optional list of (middleware_class, config_dict) tuples.

    Example:
        app = create_test_app(notifications.router)
        app = create_test_app([router], middlewares=[(RequestContextMiddleware, {})])
    """
    from api.dependencies.rate_limits import setup_rate_limiter

    app = FastAPI()
    setup_rate_limiter(app)

    if middlewares:
        for middleware_class, middleware_config in middlewares:
            app.add_middleware(middleware_class, **middleware_config)

    if not isinstance(routers, list):
        routers = [routers]
    for router in routers:
        app.include_router(router)

    return app
