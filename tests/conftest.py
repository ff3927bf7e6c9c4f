"""Shared fixtures for funcsikk tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from funcsikk.access.resolver import AccessResolver
from funcsikk.config import AccessConfig
from funcsikk.models import (
    CategoryShare,
    CategoryShareInvitation,
    PostShare,
    PostShareInvitation,
    SikkCategory,
    SikkPost,
)
from funcsikk.store import ContentStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with all tables created."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Async SQLModel session, rolled back after each test."""
    factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def store() -> ContentStore:
    return ContentStore()


@pytest.fixture
def resolver(store: ContentStore) -> AccessResolver:
    """Resolver pinned to ``NOW``."""
    return AccessResolver(store, AccessConfig(), clock=lambda: NOW)


class Seeder:
    """Inserts posts, categories, shares and invitations for a test."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _add(self, row):
        self.session.add(row)
        await self.session.flush()
        return row

    async def post(
        self,
        slug: str,
        *,
        title: str = "",
        category: str | None = None,
        is_public: bool = False,
    ) -> SikkPost:
        return await self._add(
            SikkPost(slug=slug, title=title or slug, category=category, is_public=is_public)
        )

    async def categories(self, path: str) -> list[SikkCategory]:
        """Create (or reuse) each category along a names path, root first."""
        chain: list[SikkCategory] = []
        parent_id: str | None = None
        store = ContentStore()
        for depth in range(1, len(path.split("/")) + 1):
            prefix = "/".join(path.split("/")[:depth])
            existing = await store.get_category_chain(self.session, prefix)
            if len(existing) == depth:
                category = existing[-1]
            else:
                name = prefix.split("/")[-1]
                category = await self._add(
                    SikkCategory(name=name, slug=name.lower(), parent_id=parent_id)
                )
            chain.append(category)
            parent_id = category.id
        return chain

    async def post_share(self, post: SikkPost, **kwargs) -> PostShare:
        return await self._add(PostShare(post_id=post.id, **kwargs))

    async def category_share(self, category: SikkCategory, **kwargs) -> CategoryShare:
        return await self._add(CategoryShare(category_id=category.id, **kwargs))

    async def post_invitation(self, share: PostShare, email: str, **kwargs) -> PostShareInvitation:
        return await self._add(PostShareInvitation(share_id=share.id, email=email, **kwargs))

    async def category_invitation(
        self, share: CategoryShare, email: str, **kwargs
    ) -> CategoryShareInvitation:
        return await self._add(CategoryShareInvitation(share_id=share.id, email=email, **kwargs))


@pytest.fixture
def seed(async_session: AsyncSession) -> Seeder:
    return Seeder(async_session)


@pytest.fixture
def now() -> datetime:
    return NOW
