"""Domain models for persons and relationship edges."""
from .date import DateQualifier, GenealogyDate
from .person import (
    NameType,
    Person,
    PersonEvent,
    PersonName,
    PersonWithDetails,
    PrivacyLevel,
    Sex,
    new_id,
)
from .relationship import (
    AUTO_PARTNER_DEFAULT_TYPE,
    PARENT_CHILD_TYPES,
    PARTNER_TYPES,
    QUALIFYING_PARENT_TYPES,
    CreateRelationshipInput,
    Relationship,
    RelationshipType,
    UpdateRelationshipInput,
    is_partner,
    is_qualifying_parent,
)

__all__ = [
    # Dates
    "DateQualifier",
    "GenealogyDate",
    # Persons
    "NameType",
    "Person",
    "PersonEvent",
    "PersonName",
    "PersonWithDetails",
    "PrivacyLevel",
    "Sex",
    "new_id",
    # Relationships
    "AUTO_PARTNER_DEFAULT_TYPE",
    "PARENT_CHILD_TYPES",
    "PARTNER_TYPES",
    "QUALIFYING_PARENT_TYPES",
    "CreateRelationshipInput",
    "Relationship",
    "RelationshipType",
    "UpdateRelationshipInput",
    "is_partner",
    "is_qualifying_parent",
]
