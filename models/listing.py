# models/listing.py
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class Listing(Base):
     """
     Listing read model - the rental unit a landlord publishes.

     Listing CRUD lives outside the lease engine; the engine only reads the
     landlord and property details it needs to seed a lease.
     """
     __tablename__ = "listings"

     id = Column(Integer, primary_key=True, autoincrement=True)
     landlord_user_id = Column(Integer, nullable=False, index=True)
     landlord_name = Column(String(200), nullable=True)
     landlord_email = Column(String(255), nullable=False)
     landlord_phone = Column(String(50), nullable=True)

     # Property
     address = Column(String(255), nullable=True)
     city = Column(String(100), nullable=False)
     area = Column(String(100), nullable=True)
     postal_code = Column(String(20), nullable=True)

     # Pricing
     price = Column(Numeric(12, 2), nullable=False)
     deposit = Column(Numeric(12, 2), nullable=True)
     min_term_months = Column(Integer, nullable=True)

     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     applications = relationship("Application", back_populates="listing")

     def property_snapshot(self) -> dict:
          return {
               "address": self.address or "",
               "city": self.city,
               "area": self.area or "",
               "postalCode": self.postal_code or "",
          }

     def landlord_snapshot(self) -> dict:
          return {
               "name": self.landlord_name or "",
               "email": self.landlord_email,
               "phone": self.landlord_phone or "",
          }

     def __repr__(self):
          return f"<Listing(id={self.id}, landlord_user_id={self.landlord_user_id}, city='{self.city}')>"
