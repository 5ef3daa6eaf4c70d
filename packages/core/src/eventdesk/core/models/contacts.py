"""联系人类子项模型 -- 场地、供应商、工作人员、嘉宾"""

from datetime import datetime

from pydantic import Field

from .base import CamelModel, new_id
from .enums import GuestStatus, StaffStatus, VendorStatus, VenueStatus


class Coordinates(CamelModel):
    """地理坐标"""

    lat: float
    lng: float


class Venue(CamelModel):
    """候选场地"""

    id: str = Field(default_factory=new_id)
    name: str
    address: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    capacity: int = Field(default=0, ge=0)
    status: VenueStatus = VenueStatus.POTENTIAL
    cost: float = Field(default=0, ge=0)
    notes: str | None = None
    coordinates: Coordinates | None = None


class Vendor(CamelModel):
    """供应商"""

    id: str = Field(default_factory=new_id)
    name: str
    category: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    status: VendorStatus = VendorStatus.POTENTIAL
    cost: float = Field(default=0, ge=0)
    notes: str | None = None


class Staff(CamelModel):
    """活动工作人员"""

    id: str = Field(default_factory=new_id)
    name: str
    role: str = ""
    email: str = ""
    phone: str = ""
    status: StaffStatus = StaffStatus.PENDING
    notes: str | None = None


class Guest(CamelModel):
    """嘉宾 / 报名学生

    status 为 registered 或 attended 时计入 guest_count.confirmed。
    """

    id: str = Field(default_factory=new_id)
    name: str
    email: str = ""
    registration_id: str = Field(default="", description="报名编号，签到时使用")
    status: GuestStatus = GuestStatus.INVITED
    group: str | None = Field(default=None, description="分组，如 VIP、Speaker")
    plus_one: bool = False
    dietary_notes: str | None = None
    department: str | None = None
    year: str | None = None
    checked_in_at: datetime | None = Field(default=None, description="签到时间")
