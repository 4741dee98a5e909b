from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.booking_request import BookingRequest, BookingRequestStatus  # noqa: F401
from app.models.classroom import Classroom, RoomType  # noqa: F401
from app.models.classroom_booking import ClassroomBooking, ClassroomBookingStatus  # noqa: F401
from app.models.department import Department  # noqa: F401
from app.models.faculty import Faculty, FacultyRole  # noqa: F401
from app.models.resource import Resource, ResourceType  # noqa: F401
from app.models.resource_request import (  # noqa: F401
    ResourceRequest,
    ResourceRequestPriority,
    ResourceRequestStatus,
)
from app.models.subject import Subject, SubjectType  # noqa: F401
from app.models.timetable import Timetable, TimetableEntry  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
