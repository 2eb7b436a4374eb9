from sqlalchemy import Column, ForeignKey, Index, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

# Dates are stored as ISO "YYYY-MM-DD" text, times as "HH:MM" text.
# Weekdays follow 0 = Sunday ... 6 = Saturday.


class Shops(Base):
    __tablename__ = 'shops'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    region = Column(Text, nullable=False, server_default=text("'NW'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    staff = relationship('Staff', back_populates='shop')
    services = relationship('Services', back_populates='shop')
    appointments = relationship('Appointments', back_populates='shop')


class TimeSlots(Base):
    __tablename__ = 'time_slots'
    __table_args__ = (
        UniqueConstraint('shop_id', 'time'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    time = Column(Text, nullable=False)
    active = Column(Integer, nullable=False, server_default=text('1'))
    sort_order = Column(Integer, nullable=False, server_default=text('0'))


class OpeningHours(Base):
    __tablename__ = 'opening_hours'
    __table_args__ = (
        UniqueConstraint('shop_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    is_closed = Column(Integer, nullable=False, server_default=text('0'))
    open_time = Column(Text)
    close_time = Column(Text)


class Staff(Base):
    __tablename__ = 'staff'

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    free_day = Column(Integer)
    vacation_days_per_year = Column(Integer, nullable=False, server_default=text('0'))
    start_date = Column(Text)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    sort_order = Column(Integer, nullable=False, server_default=text('0'))

    shop = relationship('Shops', back_populates='staff')
    working_hours = relationship('StaffWorkingHours', back_populates='staff')
    free_day_exceptions = relationship('FreeDayExceptions', back_populates='staff')
    time_off = relationship('StaffTimeOff', back_populates='staff')
    appointments = relationship('Appointments', back_populates='staff')


class StaffWorkingHours(Base):
    __tablename__ = 'staff_working_hours'
    __table_args__ = (
        UniqueConstraint('staff_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)

    staff = relationship('Staff', back_populates='working_hours')


class FreeDayExceptions(Base):
    __tablename__ = 'free_day_exceptions'
    __table_args__ = (
        UniqueConstraint('staff_id', 'date'),
    )

    id = Column(Integer, primary_key=True)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False, server_default=text("'10:00'"))
    end_time = Column(Text, nullable=False, server_default=text("'19:00'"))
    replacement_date = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    staff = relationship('Staff', back_populates='free_day_exceptions')


class StaffTimeOff(Base):
    __tablename__ = 'staff_time_off'

    id = Column(Integer, primary_key=True)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    start_time = Column(Text)  # NULL together with end_time = whole day
    end_time = Column(Text)
    reason = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    staff = relationship('Staff', back_populates='time_off')


class ClosedDates(Base):
    __tablename__ = 'closed_dates'
    __table_args__ = (
        UniqueConstraint('shop_id', 'date'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    reason = Column(Text)


class OpenSundays(Base):
    __tablename__ = 'open_sundays'
    __table_args__ = (
        UniqueConstraint('shop_id', 'date'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    open_time = Column(Text, nullable=False)
    close_time = Column(Text, nullable=False)


class OpenSundayStaff(Base):
    __tablename__ = 'open_sunday_staff'
    __table_args__ = (
        UniqueConstraint('shop_id', 'date', 'staff_id'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    # Keyed by date rather than open_sundays.id: rows survive an OpenSunday
    # being deleted and re-created, and are inert while no OpenSunday exists.
    date = Column(Text, nullable=False)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)


class OpenHolidays(Base):
    __tablename__ = 'open_holidays'
    __table_args__ = (
        UniqueConstraint('shop_id', 'date'),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    holiday_name = Column(Text, nullable=False)


class Services(Base):
    __tablename__ = 'services'

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    shop = relationship('Shops', back_populates='services')
    appointments = relationship('Appointments', back_populates='service')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        Index(
            'uq_appointments_booked_slot',
            'staff_id', 'date', 'time_slot',
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
    )

    id = Column(Integer, primary_key=True)
    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'booked'"))
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text)
    customer_phone = Column(Text)
    source = Column(Text, nullable=False, server_default=text("'widget'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    cancelled_at = Column(Text)

    shop = relationship('Shops', back_populates='appointments')
    staff = relationship('Staff', back_populates='appointments')
    service = relationship('Services', back_populates='appointments')
    claims = relationship('SlotClaims', back_populates='appointment')


class SlotClaims(Base):
    __tablename__ = 'slot_claims'
    __table_args__ = (
        UniqueConstraint('staff_id', 'date', 'time_slot'),
    )

    id = Column(Integer, primary_key=True)
    appointment_id = Column(ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id'), nullable=False)
    date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)

    appointment = relationship('Appointments', back_populates='claims')
