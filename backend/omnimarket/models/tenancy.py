from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..validation import ValidationError, require_text, require_number, optional_text


@dataclass(frozen=True)
class Actor:
    """
    Who is performing an operation, and from which branch.

    Passed explicitly into every ledger and checkout call; there is no
    module-level "current user".
    """
    name: str
    branch_id: str


@dataclass
class Branch:
    id: str
    name: str
    location: str
    street: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Branch":
        if not isinstance(data, dict):
            raise ValidationError("branch must be an object")
        return cls(
            id=require_text(data.get("id"), "id"),
            name=require_text(data.get("name"), "name"),
            location=str(data.get("location") or ""),
            street=str(data.get("street") or ""),
            city=str(data.get("city") or ""),
            state=str(data.get("state") or ""),
            zip_code=str(data.get("zipCode") or ""),
            latitude=require_number(data.get("latitude", 0), "latitude", minimum=-90, maximum=90),
            longitude=require_number(data.get("longitude", 0), "longitude", minimum=-180, maximum=180),
        )


@dataclass(frozen=True)
class MotoristVisit:
    """Field visit logged by a motorist. Append-only, like the adjustment ledger."""
    id: str
    motorist_name: str
    shop_name: str
    timestamp: str
    latitude: float
    longitude: float
    notes: str
    photo_url: str | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "motoristName": self.motorist_name,
            "shopName": self.shop_name,
            "timestamp": self.timestamp,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "notes": self.notes,
        }
        if self.photo_url is not None:
            data["photoUrl"] = self.photo_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MotoristVisit":
        if not isinstance(data, dict):
            raise ValidationError("visit must be an object")
        return cls(
            id=require_text(data.get("id"), "id"),
            motorist_name=str(data.get("motoristName") or ""),
            shop_name=require_text(data.get("shopName"), "shopName"),
            timestamp=require_text(data.get("timestamp"), "timestamp"),
            latitude=require_number(data.get("latitude"), "latitude", minimum=-90, maximum=90),
            longitude=require_number(data.get("longitude"), "longitude", minimum=-180, maximum=180),
            notes=str(data.get("notes") or ""),
            photo_url=optional_text(data.get("photoUrl"), "photoUrl"),
        )


@dataclass(frozen=True)
class AppConfig:
    app_name: str
    # Base64 data URL or plain URL; opaque here
    app_logo: str

    def to_dict(self) -> dict:
        return {"appName": self.app_name, "appLogo": self.app_logo}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        if not isinstance(data, dict):
            raise ValidationError("app config must be an object")
        return cls(
            app_name=str(data.get("appName") or ""),
            app_logo=str(data.get("appLogo") or ""),
        )
