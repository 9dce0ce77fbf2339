import bcrypt
from datetime import datetime, timedelta
import jwt
from flask import current_app

def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    rounds = current_app.config.get('BCRYPT_ROUNDS', 12)
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False

def generate_token(user_id: str, expires_in: int = None) -> str:
    """Generate a JWT token for a user"""
    lifetime = current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    if expires_in is not None:
        lifetime = timedelta(seconds=expires_in)
    payload = {
        'user_id': str(user_id),
        'exp': datetime.utcnow() + lifetime,
        'iat': datetime.utcnow()
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )

def verify_token(token: str) -> dict:
    """Verify and decode a JWT token"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        return {'error': 'Token expired'}
    except jwt.InvalidTokenError:
        return {'error': 'Invalid token'}
