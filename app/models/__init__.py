# importing every model registers it on Base.metadata
from app.models.room import Room, RoomStatus
from app.models.user import User, Role, ApprovalStatus
from app.models.attendance import Attendance, AttendanceStatus
from app.models.mess import MessRate, MessBill, PaymentStatus
from app.models.complaint import (
    Complaint, ComplaintStatusChange, ComplaintCategory, ComplaintStatus, ComplaintPriority,
)
from app.models.warden_request import WardenRequest
from app.models.announcement import Announcement, AnnouncementRead, AnnouncementCategory
from app.models.admin_log import AdminActionLog, AdminAction

__all__ = [
    "Room", "RoomStatus",
    "User", "Role", "ApprovalStatus",
    "Attendance", "AttendanceStatus",
    "MessRate", "MessBill", "PaymentStatus",
    "Complaint", "ComplaintStatusChange", "ComplaintCategory", "ComplaintStatus", "ComplaintPriority",
    "WardenRequest",
    "Announcement", "AnnouncementRead", "AnnouncementCategory",
    "AdminActionLog", "AdminAction",
]
