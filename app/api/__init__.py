# app/api/__init__.py
#
# The versioned router is mounted by the application factory:
#
#     from app.api.v1.router import router as api_v1_router
#     app.include_router(api_v1_router, prefix=settings.API_V1_STR)
