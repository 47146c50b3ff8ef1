"""User domain model for matchmaking profiles and account lifecycle."""

from datetime import date
from typing import List, Optional


class User:
    """
    User entity holding both the public profile and the account state.

    Attributes:
        id: Opaque unique identifier (immutable)
        name: Display name
        email: Login email address (unique)
        password_hash: bcrypt hash of the password
        location: Free-text location
        profession: Free-text profession
        about: Free-text biography
        qualities: Ordered list of quality tags
        looking_for: Free-text description of the desired match
        joined: ISO-8601 signup timestamp
        photo: Retrieval reference of the sealed profile photo
        dob: ISO date of birth (YYYY-MM-DD)
        show_age: Whether age may be shown to other users
        show_photo: Whether the photo may be shown to other users
        is_verified: Whether the email OTP has been confirmed
        verification_code: Pending OTP, cleared on verification
    """

    def __init__(
        self,
        id: str,
        name: str,
        email: str,
        password_hash: str,
        location: Optional[str] = None,
        profession: Optional[str] = None,
        about: Optional[str] = None,
        qualities: Optional[List[str]] = None,
        looking_for: Optional[str] = None,
        joined: Optional[str] = None,
        photo: Optional[str] = None,
        dob: Optional[str] = None,
        show_age: bool = True,
        show_photo: bool = True,
        is_verified: bool = False,
        verification_code: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.location = location
        self.profession = profession
        self.about = about
        self.qualities = qualities or []
        self.looking_for = looking_for
        self.joined = joined
        self.photo = photo
        self.dob = dob
        self.show_age = show_age
        self.show_photo = show_photo
        self.is_verified = is_verified
        self.verification_code = verification_code

    def age_on(self, today: date) -> Optional[int]:
        """Whole years between ``dob`` and ``today``, or None when dob is missing or unparseable."""
        if not self.dob:
            return None
        try:
            born = date.fromisoformat(self.dob[:10])
        except ValueError:
            return None
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} verified={self.is_verified}>"
