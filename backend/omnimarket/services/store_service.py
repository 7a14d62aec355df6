from __future__ import annotations

from flask import current_app

from omnimarket.models import Actor, AppConfig, Branch, MotoristVisit
from omnimarket.validation import require_number, require_text, optional_text
from omnimarket.services import storage_service
from omnimarket.services.storage_service import KEY_APP_CONFIG, KEY_BRANCHES, KEY_VISITS
from omnimarket.services.document_service import next_document_number, PREFIX_BRANCH, PREFIX_VISIT
from omnimarket.time_utils import utcnow, to_utc_z

DEFAULT_BRANCHES = [
    {
        "id": "B001",
        "name": "Cabang Pusat (Jakarta)",
        "location": "Jakarta Pusat",
        "street": "Jl. Sudirman No. 45",
        "city": "Jakarta",
        "state": "DKI Jakarta",
        "zipCode": "10220",
        "latitude": -6.2088,
        "longitude": 106.8456,
    },
    {
        "id": "B002",
        "name": "Cabang Bandung",
        "location": "Bandung Kota",
        "street": "Jl. Braga No. 10",
        "city": "Bandung",
        "state": "Jawa Barat",
        "zipCode": "40111",
        "latitude": -6.9175,
        "longitude": 107.6191,
    },
]

DEFAULT_APP_NAME = "OmniMarket"


def list_branches() -> list[Branch]:
    """All branches; the first read of an empty store persists the two default branches."""
    raw = storage_service.get_value(KEY_BRANCHES)
    if raw is None:
        storage_service.set_value(KEY_BRANCHES, DEFAULT_BRANCHES)
        raw = DEFAULT_BRANCHES
    return [Branch.from_dict(b) for b in raw]


def get_branch(branch_id: str) -> Branch | None:
    return next((b for b in list_branches() if b.id == branch_id), None)


def add_branch(
    *,
    name: str,
    location: str = "",
    street: str = "",
    city: str = "",
    state: str = "",
    zip_code: str = "",
    latitude: float = 0,
    longitude: float = 0,
) -> Branch:
    branches = list_branches()
    branch = Branch(
        id=next_document_number(prefix=PREFIX_BRANCH, existing_ids=(b.id for b in branches)),
        name=require_text(name, "name"),
        location=location or "",
        street=street or "",
        city=city or "",
        state=state or "",
        zip_code=zip_code or "",
        latitude=require_number(latitude, "latitude", minimum=-90, maximum=90),
        longitude=require_number(longitude, "longitude", minimum=-180, maximum=180),
    )
    branches.append(branch)
    storage_service.save_records(KEY_BRANCHES, branches)
    current_app.logger.info("Added branch %s (%s)", branch.id, branch.name)
    return branch


def update_branch(branch: Branch) -> bool:
    """Replace the branch with the same id. Unknown ids are ignored (returns False)."""
    branches = list_branches()
    for idx, existing in enumerate(branches):
        if existing.id == branch.id:
            branches[idx] = branch
            storage_service.save_records(KEY_BRANCHES, branches)
            return True
    return False


def delete_branch(branch_id: str) -> bool:
    """
    Idempotent delete. Products still assigned to the branch are left as-is.
    """
    branches = list_branches()
    remaining = [b for b in branches if b.id != branch_id]
    if len(remaining) == len(branches):
        return False
    storage_service.save_records(KEY_BRANCHES, remaining)
    current_app.logger.info("Deleted branch %s", branch_id)
    return True


def record_visit(
    *,
    actor: Actor,
    shop_name: str,
    latitude: float,
    longitude: float,
    notes: str = "",
    photo_url: str | None = None,
) -> MotoristVisit:
    visit = MotoristVisit(
        id=next_document_number(prefix=PREFIX_VISIT, existing_ids=storage_service.record_ids(KEY_VISITS)),
        motorist_name=actor.name,
        shop_name=require_text(shop_name, "shop_name"),
        timestamp=to_utc_z(utcnow()),
        latitude=require_number(latitude, "latitude", minimum=-90, maximum=90),
        longitude=require_number(longitude, "longitude", minimum=-180, maximum=180),
        notes=notes or "",
        photo_url=optional_text(photo_url, "photo_url"),
    )
    storage_service.append_record(KEY_VISITS, visit)
    return visit


def list_visits(motorist_name: str | None = None) -> list[MotoristVisit]:
    visits = storage_service.load_records(KEY_VISITS, MotoristVisit.from_dict)
    if motorist_name is not None:
        visits = [v for v in visits if v.motorist_name == motorist_name]
    return visits


def get_app_config() -> AppConfig:
    raw = storage_service.get_value(KEY_APP_CONFIG)
    if raw is None:
        return AppConfig(app_name=DEFAULT_APP_NAME, app_logo="")
    return AppConfig.from_dict(raw)


def save_app_config(*, app_name: str, app_logo: str = "") -> AppConfig:
    config = AppConfig(app_name=require_text(app_name, "app_name"), app_logo=app_logo or "")
    storage_service.set_value(KEY_APP_CONFIG, config.to_dict())
    return config
