# Import models in dependency order
from crm.database.models.organization import Region, Branch
from crm.database.models.auth import User, UserRole
from crm.database.models.lead import Lead
from crm.database.models.student import Student
from crm.database.models.application import Application
from crm.database.models.admission import Admission
from crm.database.models.event import Event, EventRegistration
from crm.database.models.activity import Activity
from crm.database.models.follow_up import FollowUp
from crm.database.models.university import (
    University,
    UniversityIntake,
    UniversityAcceptedElt,
    UniversityCourse,
)

__all__ = [
    "Region",
    "Branch",
    "User",
    "UserRole",
    "Lead",
    "Student",
    "Application",
    "Admission",
    "Event",
    "EventRegistration",
    "Activity",
    "FollowUp",
    "University",
    "UniversityIntake",
    "UniversityAcceptedElt",
    "UniversityCourse",
]
