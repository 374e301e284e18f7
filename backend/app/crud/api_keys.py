from sqlalchemy.orm import Session

from app.core.keys import generate_api_key, hash_token
from app.core.time import utcnow
from app.models.api_keys import ApiKey

MAX_KEY_GENERATION_ATTEMPTS = 5


def _generate_unique_key(db: Session) -> tuple[str, str]:
    for _ in range(MAX_KEY_GENERATION_ATTEMPTS):
        raw_key = generate_api_key()
        key_hash = hash_token(raw_key)
        existing = db.query(ApiKey.id).filter(ApiKey.key_hash == key_hash).first()
        if not existing:
            return raw_key, key_hash
    raise RuntimeError("Unable to generate a unique API key.")


def create_api_key(db: Session, organization_id: str, name: str) -> tuple[ApiKey, str]:
    """Create a key for an organization. The raw key is only returned here."""
    raw_key, key_hash = _generate_unique_key(db)
    api_key = ApiKey(
        organization_id=organization_id,
        name=name,
        key_hash=key_hash,
        key_prefix=raw_key[:7],
        key_suffix=raw_key[-4:],
        is_active=True,
    )
    db.add(api_key)
    db.commit()
    db.refresh(api_key)
    return api_key, raw_key


def list_api_keys(db: Session, organization_id: str) -> list[ApiKey]:
    return (
        db.query(ApiKey)
        .filter(ApiKey.organization_id == organization_id)
        .order_by(ApiKey.created_at.desc())
        .all()
    )


def get_api_key_by_raw_key(db: Session, raw_key: str) -> ApiKey | None:
    if not raw_key:
        return None
    return db.query(ApiKey).filter(ApiKey.key_hash == hash_token(raw_key)).first()


def is_api_key_authorized(db: Session, raw_key: str, organization_id: str) -> bool:
    api_key = get_api_key_by_raw_key(db, raw_key)
    if api_key is None or not api_key.is_active:
        return False
    if api_key.organization_id != organization_id:
        return False
    api_key.last_used_at = utcnow()
    db.commit()
    return True


def deactivate_api_key(db: Session, organization_id: str, api_key_id: str) -> bool:
    api_key = (
        db.query(ApiKey)
        .filter(ApiKey.id == api_key_id, ApiKey.organization_id == organization_id)
        .first()
    )
    if not api_key:
        return False
    api_key.is_active = False
    db.commit()
    return True
