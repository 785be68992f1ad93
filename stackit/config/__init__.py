from stackit.config.auth import get_current_user, hash_password, verify_password, create_access_token
from stackit.config.database import db, ensure_indexes
