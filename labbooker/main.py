import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from labbooker import __version__
from labbooker.config import LOG_LEVEL
from labbooker.routers import admin, auth, booking_types, bookings, resources, users
from labbooker.db import init_database

logging.basicConfig(level=LOG_LEVEL)


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Lab booker",
    description="Booking service for shared lab resources based on FastAPI.",
    version=__version__,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


app.include_router(auth.router)
app.include_router(resources.router)
app.include_router(booking_types.router)
app.include_router(bookings.router)
app.include_router(users.router)
app.include_router(admin.router)
