from models.base import Base
from models.class_section import ClassSection
from models.schedule import Schedule
from models.schedule_section import ScheduleSection
from models.user_schedule import UserSchedule

__all__ = [
	"Base",
	"ClassSection",
	"Schedule",
	"ScheduleSection",
	"UserSchedule",
]
