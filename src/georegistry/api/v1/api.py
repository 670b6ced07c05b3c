"""
Main API router
"""
from fastapi import APIRouter

from georegistry.api.v1.endpoints import auth, cities, countries, health, persons, provinces

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(countries.router, prefix="/countries", tags=["countries"])
api_router.include_router(provinces.router, prefix="/provinces", tags=["provinces"])
api_router.include_router(cities.router, prefix="/cities", tags=["cities"])
api_router.include_router(persons.router, prefix="/persons", tags=["persons"])
