# sponsoring/models/__init__.py
# Import all models to ensure SQLAlchemy can resolve relationships

from sponsoring.db.base_class import Base
from sponsoring.models.sponsor import Sponsor
from sponsoring.models.sponsor_package import SponsorPackage
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.models.sponsor_deliverable import SponsorDeliverable
from sponsoring.models.sponsor_portal_token import SponsorPortalToken
