"""Central model registry. Import all models so Alembic autodiscover works."""

from rfp_hub.database import Base  # noqa: F401

from rfp_hub.models.user import User  # noqa: F401
from rfp_hub.models.project import Project, Product  # noqa: F401
from rfp_hub.models.rfp import Rfp, RfpItem  # noqa: F401
from rfp_hub.models.proposal import Proposal, ProposalItem  # noqa: F401
