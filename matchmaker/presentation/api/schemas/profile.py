"""Pydantic schemas and response shaping for profile endpoints."""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ....domain.models import User


class ProfileFields(BaseModel):
    """Allow-listed profile fields. Unknown keys are dropped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location: Optional[str] = None
    profession: Optional[str] = None
    about: Optional[str] = None
    qualities: Optional[Union[List[str], str]] = None
    looking_for: Optional[str] = Field(default=None, alias="lookingFor")
    photo: Optional[str] = None
    dob: Optional[str] = None
    show_age: Optional[bool] = Field(default=None, alias="showAge")
    show_photo: Optional[bool] = Field(default=None, alias="showPhoto")

    def submitted(self, *exclude: str) -> Dict[str, Any]:
        """Fields the client actually sent, keyed by storage column name."""
        return self.model_dump(exclude_unset=True, exclude=set(exclude))


class ProfileUpdateRequest(ProfileFields):
    name: Optional[str] = None


def public_profile(user: User) -> Dict[str, Any]:
    """User record safe to hand to its owner: no password hash, no pending code."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "location": user.location,
        "profession": user.profession,
        "about": user.about,
        "qualities": list(user.qualities),
        "lookingFor": user.looking_for,
        "joined": user.joined,
        "photo": user.photo,
        "dob": user.dob,
        "showAge": int(user.show_age),
        "showPhoto": int(user.show_photo),
        "is_verified": int(user.is_verified),
    }


def directory_profile(user: User, today: Optional[date] = None) -> Dict[str, Any]:
    """Profile as listed to other users, honouring the visibility flags."""
    item = public_profile(user)
    if user.show_age:
        item["age"] = user.age_on(today or date.today())
    else:
        item["dob"] = None
        item["age"] = None
    if not user.show_photo:
        item["photo"] = None
    return item
