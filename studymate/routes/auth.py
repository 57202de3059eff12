"""
Authentication Routes

FLOW OVERVIEW
- /api/auth/register [POST]
  • Validate name/email/password (+ optional study profile) → create user → 201.
- /api/auth/login [POST]
  • Authenticate → set session.
- /api/auth/logout [POST]
  • Clear session.
- /api/auth/me [GET]
  • Logged-in user's profile.
- /api/auth/profile [PUT]
  • Update study preferences used by matching.
"""

import logging
from functools import wraps
from flask import Blueprint, jsonify, session, current_app

from ..constants import EXPERIENCE_LEVELS
from ..models import db, User
from ..utils.api_utils import request_validator
from ..utils.auth_utils import create_user, authenticate_user
from ..utils.error_handlers import ValidationError
from ..utils.validators import validate_email, validate_password, require, sanitize_input

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def login_required(f):
    """Decorator to require user login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return jsonify({'error': 'Unauthorized. Please log in.'}), 401
        return f(*args, **kwargs)
    return decorated_function


def profile_fields(data):
    """Extract and validate the optional study profile fields of a request body"""
    profile = {}

    study_style = data.get('studyStyle')
    if study_style is not None:
        if not isinstance(study_style, dict):
            raise ValidationError('Study style must be an object', 'studyStyle')
        profile['study_style'] = {key: sanitize_input(value, max_length=100)
                                  if isinstance(value, str) else value
                                  for key, value in study_style.items()}

    tags = data.get('interestTags')
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValidationError('Interest tags must be an array of strings', 'interestTags')
        profile['interest_tags'] = [sanitize_input(t, max_length=100) for t in tags if t.strip()]

    availability = data.get('availability')
    if availability is not None:
        if not isinstance(availability, dict):
            raise ValidationError('Availability must be an object', 'availability')
        profile['availability'] = availability

    level = data.get('experienceLevel')
    if level is not None:
        if level not in EXPERIENCE_LEVELS:
            raise ValidationError(
                f"Experience level must be one of: {', '.join(EXPERIENCE_LEVELS)}", 'experienceLevel')
        profile['experience_level'] = level

    return profile


def current_user():
    user = db.session.get(User, session['user_id'])
    if not user:
        session.clear()
    return user


@auth_bp.route('/register', methods=['POST'])
def register():
    """User registration endpoint"""
    data = request_validator.get_json_body()
    name = data.get('name')
    email = data.get('email')
    password = data.get('password')

    if not name or not email or not password:
        raise ValidationError('Name, email, and password are required')

    email = require(validate_email(email), 'email')
    password = require(validate_password(password), 'password')
    profile = profile_fields(data)

    if User.query.filter_by(email=email).first():
        raise ValidationError('User with this email already exists', 'email')

    try:
        user = create_user(name, email, password,
                           rounds=current_app.config.get('BCRYPT_ROUNDS', 12), **profile)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    logger.info(f"Registered user {user.id}")
    return jsonify({'message': 'User created successfully', 'userId': user.id}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """User login endpoint"""
    data = request_validator.get_json_body()
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        raise ValidationError('Email and password are required')

    user = authenticate_user(email, password)
    if not user:
        logger.warning("Failed login attempt")
        return jsonify({'error': 'Invalid email or password'}), 401

    session.clear()
    session['user_id'] = user.id
    session['user_email'] = user.email
    return jsonify({'message': 'Logged in successfully', 'user': user.to_dict()}), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """User logout endpoint"""
    session.clear()
    return jsonify({'message': 'Logged out successfully'}), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    user = current_user()
    if not user:
        return jsonify({'error': 'Unauthorized. Please log in.'}), 401
    return jsonify({'user': user.to_dict()}), 200


@auth_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    """Update the logged-in user's study preferences"""
    user = current_user()
    if not user:
        return jsonify({'error': 'Unauthorized. Please log in.'}), 401

    data = request_validator.get_json_body()
    user.update_profile(**profile_fields(data))
    db.session.commit()
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict()}), 200
