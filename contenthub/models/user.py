from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from contenthub.database import Base


class RoleEnum(str, enum.Enum):
    user = "user"
    admin = "admin"


# Profile/role store. Credentials live with the external auth provider;
# this row is what the authorization checks consult.
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False, default="")
    avatar_url = Column(String, nullable=True)
    role = Column(Enum(RoleEnum), default=RoleEnum.user, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    comments = relationship("ClassComment", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
