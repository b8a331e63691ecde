from traincore.models.batch import Batch
from traincore.models.student import Student
from traincore.models.attendance import AttendanceRecord
from traincore.models.teacher import Teacher
from traincore.models.teacher_attendance import TeacherAttendance
from traincore.models.task import Task
from traincore.models.admin import AdminProfile

__all__ = ["Batch", "Student", "AttendanceRecord", "Teacher", "TeacherAttendance",
           "Task", "AdminProfile"]
