# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import StrEnum


class UserType(StrEnum):
    DRIVER = "driver"
    SHIPPER = "shipper"
    ADMIN = "admin"


class FleetRole(StrEnum):
    INDEPENDENT = "INDEPENDENT"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    DRIVER = "DRIVER"


class DriverStatus(StrEnum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class LoadStatus(StrEnum):
    NEW = "NEW"
    QUOTED = "QUOTED"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    SCHEDULED = "SCHEDULED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(StrEnum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    VOID = "VOID"


class PaymentTerms(StrEnum):
    NET_7 = "NET_7"
    NET_14 = "NET_14"
    NET_30 = "NET_30"
    INVOICE_ONLY = "INVOICE_ONLY"


class NotificationType(StrEnum):
    LOAD_STATUS = "LOAD_STATUS"
    QUOTE_READY = "QUOTE_READY"
    DRIVER_ASSIGNED = "DRIVER_ASSIGNED"
    VEHICLE_REGISTRATION_EXPIRING = "VEHICLE_REGISTRATION_EXPIRING"


class ServiceType(StrEnum):
    STAT = "STAT"
    SAME_DAY = "SAME_DAY"
    SCHEDULED_ROUTE = "SCHEDULED_ROUTE"
    OVERFLOW = "OVERFLOW"
    GOVERNMENT = "GOVERNMENT"
    UN3373 = "UN3373"
    NON_SPECIMEN = "NON_SPECIMEN"
    PHARMACEUTICAL = "PHARMACEUTICAL"
    OTHER = "OTHER"


class TemperatureRequirement(StrEnum):
    AMBIENT = "AMBIENT"
    REFRIGERATED = "REFRIGERATED"
    FROZEN = "FROZEN"
    OTHER = "OTHER"


class FacilityType(StrEnum):
    CLINIC = "CLINIC"
    LAB = "LAB"
    HOSPITAL = "HOSPITAL"
    PHARMACY = "PHARMACY"
    DIALYSIS = "DIALYSIS"
    IMAGING = "IMAGING"
    GOVERNMENT = "GOVERNMENT"
    OTHER = "OTHER"


class VehicleType(StrEnum):
    SEDAN = "SEDAN"
    SUV = "SUV"
    VAN = "VAN"
    SPRINTER = "SPRINTER"
    BOX_TRUCK = "BOX_TRUCK"
    REFRIGERATED = "REFRIGERATED"


class DocumentType(StrEnum):
    BOL = "BOL"
    PROOF_OF_PICKUP = "PROOF_OF_PICKUP"
    PROOF_OF_DELIVERY = "PROOF_OF_DELIVERY"
    CHAIN_OF_CUSTODY = "CHAIN_OF_CUSTODY"
    TEMPERATURE_LOG = "TEMPERATURE_LOG"
    OTHER = "OTHER"


__all__ = [
    "DocumentType",
    "DriverStatus",
    "FacilityType",
    "FleetRole",
    "InvoiceStatus",
    "LoadStatus",
    "NotificationType",
    "PaymentTerms",
    "ServiceType",
    "TemperatureRequirement",
    "UserType",
    "VehicleType",
]
