# Import all models to ensure they are registered with SQLAlchemy
from .property_safe.properties_safe import PropertySafe
from .property_safe.units_safe import UnitSafe
from .property_safe.tenants_safe import TenantSafe
from .lease_templates.lease_templates import LeaseTemplate
from .lease_templates.property_lease_templates import PropertyLeaseTemplate
from .lease_documents.lease_documents import LeaseDocument
from .lease_documents.signature_requests import SignatureRequest
from .lease_documents.lease_audit_events import LeaseAuditEvent
