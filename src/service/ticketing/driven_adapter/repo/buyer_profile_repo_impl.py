from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_buyer_profile_repo import IBuyerProfileRepo
from src.service.ticketing.domain.entity.buyer_profile_entity import BuyerProfileEntity
from src.service.ticketing.driven_adapter.model.buyer_profile_model import BuyerProfileModel


class BuyerProfileRepoImpl(IBuyerProfileRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: BuyerProfileModel) -> BuyerProfileEntity:
        return BuyerProfileEntity(
            user_id=model.user_id,
            email=model.email,
            display_name=model.display_name,
            payer_reference=model.payer_reference,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    @Logger.io
    async def get_by_user_id(self, *, user_id: str) -> BuyerProfileEntity | None:
        result = await self.session.execute(
            select(BuyerProfileModel).where(BuyerProfileModel.user_id == user_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @Logger.io
    async def get_or_create(self, *, profile: BuyerProfileEntity) -> BuyerProfileEntity:
        existing = await self.get_by_user_id(user_id=profile.user_id)
        if existing is not None:
            return existing

        try:
            # Savepoint: losing the insert race must not roll back the caller's transaction
            async with self.session.begin_nested():
                self.session.add(
                    BuyerProfileModel(
                        user_id=profile.user_id,
                        email=profile.email,
                        display_name=profile.display_name,
                        payer_reference=profile.payer_reference,
                        created_at=profile.created_at,
                        updated_at=profile.updated_at,
                    )
                )
        except IntegrityError:
            Logger.base.info(f'👤 [PROFILE] {profile.user_id} created concurrently, re-reading')
            winner = await self.get_by_user_id(user_id=profile.user_id)
            if winner is None:
                raise
            return winner

        Logger.base.info(f'👤 [PROFILE] backfilled default profile for {profile.user_id}')
        return profile

    @Logger.io
    async def update(self, *, profile: BuyerProfileEntity) -> BuyerProfileEntity:
        result = await self.session.execute(
            update(BuyerProfileModel)
            .where(BuyerProfileModel.user_id == profile.user_id)
            .values(
                email=profile.email,
                display_name=profile.display_name,
                payer_reference=profile.payer_reference,
                updated_at=profile.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f'Buyer profile {profile.user_id} not found')
        return profile
