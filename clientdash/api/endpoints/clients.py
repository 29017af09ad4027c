"""
Clients API Endpoints

CRUD operations on the subscription clients owned by the authenticated user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from clientdash.api.dependencies import get_current_user, get_db
from clientdash.models.client import Client
from clientdash.models.user import User
from clientdash.schemas.auth import MessageOut
from clientdash.schemas.client import ClientCreate, ClientOut, ClientPatch, ClientReplace

router = APIRouter()


async def _get_owned_client(db: AsyncSession, client_id: str, owner: User) -> Client:
    result = await db.execute(
        select(Client).filter(Client.id == client_id, Client.owner_id == owner.id)
    )
    client = result.scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


async def _ensure_email_available(
    db: AsyncSession, email: str, owner: User, exclude_id: Optional[str] = None
):
    query = select(Client.id).filter(
        Client.owner_id == owner.id,
        func.lower(Client.email) == email.lower()
    )
    if exclude_id:
        query = query.filter(Client.id != exclude_id)
    result = await db.execute(query)
    if result.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Client with this email already exists"
        )


# ==================== Queries ====================

@router.get("", response_model=List[ClientOut])
async def list_clients(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List every client of the current user, oldest first."""
    result = await db.execute(
        select(Client)
        .filter(Client.owner_id == current_user.id)
        .order_by(Client.created_at)
    )
    return result.scalars().all()


@router.get("/email/{email}", response_model=ClientOut)
async def get_client_by_email(
    email: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Client).filter(
            Client.owner_id == current_user.id,
            func.lower(Client.email) == email.lower()
        )
    )
    client = result.scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _get_owned_client(db, client_id, current_user)


# ==================== Mutations ====================

@router.post("", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await _ensure_email_available(db, client_data.email, current_user)

    client = Client(owner_id=current_user.id, **client_data.model_dump())
    db.add(client)
    await db.commit()
    await db.refresh(client)
    return client


@router.put("/{client_id}", response_model=ClientOut)
async def replace_client(
    client_id: str,
    client_data: ClientReplace,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Replace every editable field; an omitted ``notes`` clears it."""
    client = await _get_owned_client(db, client_id, current_user)
    await _ensure_email_available(db, client_data.email, current_user, exclude_id=client.id)

    for field, value in client_data.model_dump().items():
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)
    return client


@router.patch("/{client_id}", response_model=ClientOut)
async def patch_client(
    client_id: str,
    client_data: ClientPatch,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update only the fields present in the request body."""
    client = await _get_owned_client(db, client_id, current_user)
    changes = client_data.model_dump(exclude_unset=True)

    if "email" in changes:
        await _ensure_email_available(db, changes["email"], current_user, exclude_id=client.id)

    for field, value in changes.items():
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)
    return client


@router.delete("/{client_id}", response_model=MessageOut)
async def delete_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    client = await _get_owned_client(db, client_id, current_user)
    await db.delete(client)
    await db.commit()
    return {"message": "Client removed"}
