# PCO Arrivals Billboard — Database Models
# Import all models here for SQLAlchemy discovery

from arrivals.models.authorized_user import AuthorizedUser   # noqa
