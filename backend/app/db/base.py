# Import all the models, so that Base has them before create_all runs
from app.db.base_class import Base  # noqa

from app.models.user import User  # noqa
from app.models.employee import Employee  # noqa
