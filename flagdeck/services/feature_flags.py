"""
Feature flags: tenant-scoped CRUD plus the targeting resolver.

A flag name can have several stored variants, each pinned to some
combination of user id, user role and account id ("" = not targeted).
Resolution walks a fixed cascade from the most specific variant to the
project-wide default and stops at the first hit:

    tier     user_id user_role   user_account_id   tried when
    -------  ------- ---------   ---------------   -------------------------
    user     given   given       given             all three are supplied
    role     ""      given       given             role and account supplied
    account  ""      ""          given             account supplied
    default  ""      ""          ""                always

A user id on its own never selects anything but the default; only the four
tiers above exist.
"""
import logging
from typing import Iterable, List, NamedTuple, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models.feature_flag import FeatureFlag
from ..schemas.feature_flag import FeatureFlagCreate, FeatureFlagUpdate
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


class ResolvedFlag(NamedTuple):
    name: str
    value: str
    value_type: str


def _clean(dimension: Optional[str]) -> Optional[str]:
    """Empty strings count as "not supplied" """
    return dimension or None


def _cascade(user_id: Optional[str], user_role: Optional[str], user_account_id: Optional[str]):
    """Yield (tier, user_id, user_role, user_account_id) lookups in priority order"""
    if user_id and user_role and user_account_id:
        yield "user", user_id, user_role, user_account_id
    if user_role and user_account_id:
        yield "role", "", user_role, user_account_id
    if user_account_id:
        yield "account", "", "", user_account_id
    yield "default", "", "", ""


class FeatureFlagService:
    """Service for managing and resolving feature flags"""

    @staticmethod
    def list_flags(db: Session, project_id: int, tenant_id: int) -> List[FeatureFlag]:
        return (
            db.query(FeatureFlag)
            .filter(and_(FeatureFlag.project_id == project_id, FeatureFlag.tenant_id == tenant_id))
            .order_by(FeatureFlag.created_at.desc(), FeatureFlag.id.desc())
            .all()
        )

    @staticmethod
    def get_flag(db: Session, flag_id: int, tenant_id: int, project_id: Optional[int] = None) -> Optional[FeatureFlag]:
        query = db.query(FeatureFlag).filter(and_(FeatureFlag.id == flag_id, FeatureFlag.tenant_id == tenant_id))
        if project_id is not None:
            query = query.filter(FeatureFlag.project_id == project_id)
        return query.first()

    @staticmethod
    def _find_variant(db: Session, tenant_id: int, project_id: int, name: str,
                      user_id: str, user_role: str, user_account_id: str,
                      exclude_id: Optional[int] = None) -> Optional[FeatureFlag]:
        query = db.query(FeatureFlag).filter(
            FeatureFlag.tenant_id == tenant_id,
            FeatureFlag.project_id == project_id,
            FeatureFlag.name == name,
            FeatureFlag.user_id == user_id,
            FeatureFlag.user_role == user_role,
            FeatureFlag.user_account_id == user_account_id,
        )
        if exclude_id is not None:
            query = query.filter(FeatureFlag.id != exclude_id)
        return query.first()

    @staticmethod
    def create_flag(db: Session, data: FeatureFlagCreate, project_id: int, tenant_id: int) -> FeatureFlag:
        """Create a flag variant; the targeting tuple must be new"""
        if FeatureFlagService._find_variant(db, tenant_id, project_id, data.name,
                                            data.user_id, data.user_role, data.user_account_id):
            raise ConflictError("Feature flag variant already exists")

        flag = FeatureFlag(
            tenant_id=tenant_id,
            project_id=project_id,
            name=data.name,
            description=data.description,
            value_type=data.value_type,
            value=data.value,
            is_public=data.is_public,
            user_id=data.user_id,
            user_role=data.user_role,
            user_account_id=data.user_account_id,
        )
        db.add(flag)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Feature flag variant already exists")
        db.refresh(flag)
        logger.info("feature flag created", extra={"flag_id": flag.id, "tenant_id": tenant_id, "project_id": project_id})
        return flag

    @staticmethod
    def update_flag(db: Session, flag_id: int, tenant_id: int, patch: FeatureFlagUpdate,
                    project_id: Optional[int] = None) -> FeatureFlag:
        """Apply only the supplied fields"""
        flag = FeatureFlagService.get_flag(db, flag_id, tenant_id, project_id)
        if flag is None:
            raise NotFoundError("Feature flag not found")

        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(flag, field, value)

        # The pending change must not be flushed by the lookup
        with db.no_autoflush:
            taken = FeatureFlagService._find_variant(db, tenant_id, flag.project_id, flag.name, flag.user_id,
                                                     flag.user_role, flag.user_account_id, exclude_id=flag.id)
        if taken:
            db.rollback()
            raise ConflictError("Feature flag variant already exists")

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Feature flag variant already exists")
        db.refresh(flag)
        return flag

    @staticmethod
    def delete_flag(db: Session, flag_id: int, tenant_id: int, project_id: Optional[int] = None) -> None:
        flag = FeatureFlagService.get_flag(db, flag_id, tenant_id, project_id)
        if flag is None:
            raise NotFoundError("Feature flag not found")
        db.delete(flag)
        db.commit()

    @staticmethod
    def resolve(
        db: Session,
        project_id: int,
        tenant_id: int,
        names: Iterable[str],
        user_id: Optional[str] = None,
        user_role: Optional[str] = None,
        user_account_id: Optional[str] = None,
        public_only: bool = False,
    ) -> List[ResolvedFlag]:
        """Pick the most specific variant for each requested name.

        Names that match nothing are left out of the result. With
        ``public_only`` every tier also requires ``is_public``, so a private
        variant never wins, not even as the fallback.
        """
        user_id, user_role, user_account_id = _clean(user_id), _clean(user_role), _clean(user_account_id)

        results: List[ResolvedFlag] = []
        seen = set()
        for name in names:
            name = name.strip()
            if not name or name in seen:
                continue
            seen.add(name)

            for tier, uid, role, account in _cascade(user_id, user_role, user_account_id):
                query = db.query(FeatureFlag).filter(
                    FeatureFlag.tenant_id == tenant_id,
                    FeatureFlag.project_id == project_id,
                    FeatureFlag.name == name,
                    FeatureFlag.user_id == uid,
                    FeatureFlag.user_role == role,
                    FeatureFlag.user_account_id == account,
                )
                if public_only:
                    query = query.filter(FeatureFlag.is_public.is_(True))
                flag = query.order_by(FeatureFlag.id.asc()).first()
                if flag is not None:
                    prometheus_metrics.record_flag_resolution(tier)
                    results.append(ResolvedFlag(flag.name, flag.value, flag.value_type))
                    break
            else:
                prometheus_metrics.record_flag_resolution("none")

        return results
