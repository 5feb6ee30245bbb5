from fastapi import APIRouter
from crm.routers.auth import auth_router
from crm.routers.users import users_router
from crm.routers.organization import region_router, branch_router
from crm.routers.leads import lead_router
from crm.routers.students import student_router
from crm.routers.applications import application_router
from crm.routers.admissions import admission_router
from crm.routers.events import event_router
from crm.routers.event_registrations import registration_router
from crm.routers.activities import activity_router
from crm.routers.follow_ups import follow_up_router
from crm.routers.universities import university_router, course_router

# Create API router with prefix
api_router = APIRouter(prefix="/api/v1")

# Include all routers
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(region_router)
api_router.include_router(branch_router)
api_router.include_router(lead_router)
api_router.include_router(student_router)
api_router.include_router(application_router)
api_router.include_router(admission_router)
api_router.include_router(event_router)
api_router.include_router(registration_router)
api_router.include_router(activity_router)
api_router.include_router(follow_up_router)
api_router.include_router(university_router)
api_router.include_router(course_router)
