from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
from flask import current_app
from typing import List, Dict, Optional
import logging

logger = logging.getLogger(__name__)

class Database:
    """MongoDB database service"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.client = MongoClient(current_app.config['MONGODB_URI'])
        self.db = self.client[current_app.config['MONGODB_DATABASE']]
        self._create_indexes()
        self._initialized = True

    def _create_indexes(self):
        """Create indexes for collections"""
        # Users indexes
        self.db.users.create_index('email', unique=True)
        self.db.users.create_index('username', unique=True)

        # Groups indexes
        self.db.groups.create_index('invite_code', unique=True)
        self.db.groups.create_index('created_by')

        # Membership indexes
        self.db.group_members.create_index([('group_id', ASCENDING), ('user_id', ASCENDING)], unique=True)
        self.db.group_members.create_index('user_id')

        # Posts indexes
        self.db.posts.create_index('group_id')
        self.db.posts.create_index('user_id')
        self.db.posts.create_index([('group_id', ASCENDING), ('created_at', DESCENDING)])
        self.db.posts.create_index('hearts')

        # User streaks
        self.db.user_streaks.create_index('user_id', unique=True)

        # Notifications indexes
        self.db.notifications.create_index('user_id')
        self.db.notifications.create_index([('created_at', DESCENDING)])
        self.db.notifications.create_index([('user_id', ASCENDING), ('is_read', ASCENDING)])

    def insert_one(self, collection_name: str, document: Dict) -> Optional[str]:
        """Insert a single document"""
        try:
            result = self.db[collection_name].insert_one(document)
            return str(result.inserted_id)
        except PyMongoError as e:
            logger.error(f"Error inserting document into {collection_name}: {e}")
            return None

    def find_one(self, collection_name: str, query: Dict) -> Optional[Dict]:
        """Find a single document"""
        try:
            return self.db[collection_name].find_one(query)
        except PyMongoError as e:
            logger.error(f"Error finding document in {collection_name}: {e}")
            return None

    def find(self, collection_name: str, query: Dict, skip: int = 0,
            limit: int = 0, sort: object = None) -> List[Dict]:
        """Find multiple documents"""
        try:
            cursor = self.db[collection_name].find(query).skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            if sort:
                # Handle both list of tuples (pymongo style) and single tuple
                if isinstance(sort, list):
                    cursor = cursor.sort(sort)
                elif isinstance(sort, tuple):
                    cursor = cursor.sort(sort[0], sort[1])
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error finding documents in {collection_name}: {e}")
            return []

    def update_one(self, collection_name: str, query: Dict,
                  update: Dict, raw: bool = False) -> bool:
        """Update a single document.

        Args:
            collection_name: Name of the collection
            query: Query to find the document
            update: Update operations to apply
            raw: If True, use update as-is (for $push, $inc, etc.)
                 If False (default), wrap in $set for simple field updates
        """
        try:
            has_operators = any(key.startswith('$') for key in update.keys())

            if raw or has_operators:
                result = self.db[collection_name].update_one(query, update)
            else:
                result = self.db[collection_name].update_one(query, {'$set': update})
            return result.modified_count > 0
        except PyMongoError as e:
            logger.error(f"Error updating document in {collection_name}: {e}")
            return False

    def update_many(self, collection_name: str, query: Dict,
                   update: Dict) -> int:
        """Update multiple documents"""
        try:
            result = self.db[collection_name].update_many(query, {'$set': update})
            return result.modified_count
        except PyMongoError as e:
            logger.error(f"Error updating documents in {collection_name}: {e}")
            return 0

    def delete_one(self, collection_name: str, query: Dict) -> bool:
        """Delete a single document"""
        try:
            result = self.db[collection_name].delete_one(query)
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.error(f"Error deleting document in {collection_name}: {e}")
            return False

    def count(self, collection_name: str, query: Dict = None) -> int:
        """Count documents"""
        try:
            query = query or {}
            return self.db[collection_name].count_documents(query)
        except PyMongoError as e:
            logger.error(f"Error counting documents in {collection_name}: {e}")
            return 0
