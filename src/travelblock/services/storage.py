# services/storage.py
"""
Persistence of the user's home airport and onboarding flag.

`KeyValueStore` is a thin get/set/remove layer over the `kv_store` table.
`HomeAirportStore` adds the app-level semantics on top: records are stored as
JSON and validated on the way back out, read failures degrade to "nothing
stored", write failures are logged and re-raised.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from travelblock.core.schemas import AirportRecord
from travelblock.database.models import KeyValue

logger = logging.getLogger(__name__)

HOME_AIRPORT_KEY = "travelblock_home_airport"
ONBOARDING_COMPLETE_KEY = "travelblock_onboarding_complete"


class KeyValueStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.get(KeyValue, key)
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self.db.merge(KeyValue(key=key, value=value))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def remove(self, key: str) -> None:
        try:
            self.db.query(KeyValue).filter(KeyValue.key == key).delete()
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class HomeAirportStore:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def save_home_airport(self, airport: AirportRecord) -> None:
        try:
            self.kv.set(HOME_AIRPORT_KEY, airport.model_dump_json())
        except SQLAlchemyError as e:
            logger.error(f"Error saving home airport {airport.code}: {e}")
            raise

    def get_home_airport(self) -> Optional[AirportRecord]:
        """Stored home airport, or None if absent, unreadable or missing coordinates."""
        try:
            raw = self.kv.get(HOME_AIRPORT_KEY)
        except SQLAlchemyError as e:
            logger.error(f"Error reading home airport: {e}")
            return None
        if raw is None:
            return None

        try:
            airport = AirportRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored home airport is invalid, ignoring it: {e}")
            return None
        if airport.position is None:
            logger.warning(f"Stored home airport {airport.code} has no coordinates, ignoring it")
            return None
        return airport

    def clear_home_airport(self) -> None:
        try:
            self.kv.remove(HOME_AIRPORT_KEY)
        except SQLAlchemyError as e:
            logger.error(f"Error clearing home airport: {e}")
            raise

    def has_home_airport(self) -> bool:
        return self.get_home_airport() is not None

    def set_onboarding_complete(self, complete: bool) -> None:
        """Store the flag as "true"; clearing it removes the key."""
        try:
            if complete:
                self.kv.set(ONBOARDING_COMPLETE_KEY, "true")
            else:
                self.kv.remove(ONBOARDING_COMPLETE_KEY)
        except SQLAlchemyError as e:
            logger.error(f"Error saving onboarding flag: {e}")
            raise

    def is_onboarding_complete(self) -> bool:
        try:
            return self.kv.get(ONBOARDING_COMPLETE_KEY) == "true"
        except SQLAlchemyError as e:
            logger.error(f"Error reading onboarding flag: {e}")
            return False
