from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.buyer_profile_entity import BuyerProfileEntity


class IBuyerProfileRepo(ABC):
    @abstractmethod
    async def get_by_user_id(self, *, user_id: str) -> BuyerProfileEntity | None:
        pass

    @abstractmethod
    async def get_or_create(self, *, profile: BuyerProfileEntity) -> BuyerProfileEntity:
        """
        Return the stored profile of ``profile.user_id``; insert ``profile`` when
        there is none. A concurrent insert for the same user is resolved by
        returning the row that won.
        """
        pass

    @abstractmethod
    async def update(self, *, profile: BuyerProfileEntity) -> BuyerProfileEntity:
        pass
