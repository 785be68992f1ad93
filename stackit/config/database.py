from pymongo import MongoClient

from stackit.config.settings import MONGODB_URL, MONGODB_DB

# MongoClient connects lazily, so importing this module needs no running server
client = MongoClient(MONGODB_URL, tz_aware=True)
db = client[MONGODB_DB]


def ensure_indexes(database=None):
    database = database if database is not None else db
    database.users.create_index("username", unique=True)
    database.users.create_index("email", unique=True)
    database.questions.create_index([("isActive", 1), ("createdAt", -1)])
    database.questions.create_index("tags")
    database.answers.create_index("question")
