# sponsoring/crud/__init__.py

from .crud_sponsor import sponsor, sponsor_package, sponsorship
from .crud_sponsor_deliverable import sponsor_deliverable
from .crud_sponsor_portal_token import sponsor_portal_token
