import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.exception_handler import ValidationErrorHandler
from core.lifespan import lifespan
from core.settings import settings
from routes.auth_routes import router as auth_router
from routes.booking_routes import router as booking_router
from routes.details_routes import router as details_router
from routes.favorite_routes import router as favorite_router
from routes.inquiry_routes import router as inquiry_router
from routes.listing_routes import router as listing_router
from routes.message_routes import router as message_router
from routes.notification_routes import router as notification_router
from routes.property_details_routes import router as property_details_router
from routes.property_image_routes import router as property_image_router
from routes.property_routes import router as property_router
from routes.review_routes import router as review_router
from routes.student_profile_routes import router as student_profile_router
from routes.user_routes import router as user_router

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version="1.0.0",
)

app.include_router(auth_router, prefix="/api/auth")
app.include_router(user_router, prefix="/api/users")
app.include_router(property_router, prefix="/api/properties")
app.include_router(listing_router, prefix="/api/property-listing")
app.include_router(details_router, prefix="/api/details")
app.include_router(property_image_router, prefix="/api/property-images")
app.include_router(property_details_router, prefix="/api/property-details")
app.include_router(booking_router, prefix="/api/bookings")
app.include_router(inquiry_router, prefix="/api/inquiries")
app.include_router(review_router, prefix="/api/reviews")
app.include_router(favorite_router, prefix="/api/favorites")
app.include_router(notification_router, prefix="/api/notifications")
app.include_router(message_router, prefix="/api/messages")
app.include_router(student_profile_router, prefix="/api/student-profiles")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}


app.add_exception_handler(
    RequestValidationError,
    ValidationErrorHandler(),
)

app.add_middleware(ErrorHandlerMiddleware)


if __name__ == "__main__":
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=True)
