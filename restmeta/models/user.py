from sqlalchemy import Column, Integer, String, ForeignKey, JSON
from sqlalchemy.orm import relationship
from restmeta.database import Base
import enum


# Enum for predefined roles
class RoleEnum(str, enum.Enum):
    subscriber = "subscriber"
    author = "author"
    editor = "editor"
    admin = "admin"


# Role model
class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    permissions = Column(JSON, nullable=False, default=list)  # Extra capabilities granted on top of the role table
    users = relationship("User", back_populates="role")


# User model
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, index=True)
    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    role = relationship("Role", back_populates="users", lazy="joined")

    posts = relationship("Post", back_populates="author")
