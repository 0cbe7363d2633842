# backend/slotswap/models/tables.py

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class SlotStatus(str, enum.Enum):
    BUSY = "BUSY"
    SWAPPABLE = "SWAPPABLE"
    SWAP_PENDING = "SWAP_PENDING"


class SwapStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Users(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    slots = relationship('Slots', back_populates='owner')


class Slots(Base):
    __tablename__ = 'slots'
    __table_args__ = (
        Index('ix_slots_time_range', 'start_time', 'end_time'),
    )

    id = Column(Integer, primary_key=True)
    owner_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(Text, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        Enum(SlotStatus, name='slot_status', native_enum=False),
        nullable=False,
        default=SlotStatus.BUSY,
    )
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship('Users', back_populates='slots')

    # Every UPDATE is guarded by "WHERE version = :loaded_version"
    __mapper_args__ = {'version_id_col': version}


class SwapRequests(Base):
    __tablename__ = 'swap_requests'

    id = Column(Integer, primary_key=True)
    my_slot_id = Column(ForeignKey('slots.id', ondelete='SET NULL'), index=True)
    their_slot_id = Column(ForeignKey('slots.id', ondelete='SET NULL'), index=True)
    requester_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    responder_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    status = Column(
        Enum(SwapStatus, name='swap_status', native_enum=False),
        nullable=False,
        default=SwapStatus.PENDING,
    )
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    resolved_at = Column(DateTime)

    my_slot = relationship('Slots', foreign_keys=[my_slot_id])
    their_slot = relationship('Slots', foreign_keys=[their_slot_id])
    requester = relationship('Users', foreign_keys=[requester_id])
    responder = relationship('Users', foreign_keys=[responder_id])

    __mapper_args__ = {'version_id_col': version}
