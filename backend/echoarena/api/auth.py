import random
from datetime import datetime, timedelta, timezone

from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from echoarena import bcrypt, db
from echoarena.api.validation import json_body
from echoarena.models import User

auth = Blueprint('auth', __name__)

GUEST_USERNAME_PREFIX = 'Guest_'


def _guest_username():
    return f"{GUEST_USERNAME_PREFIX}{random.randint(10000, 99999)}"


@auth.route('/guest', methods=['POST'])
def create_guest():
    username = _guest_username()
    while User.query.filter_by(username=username).first():
        username = _guest_username()
    days = int(current_app.config.get('GUEST_EXPIRY_DAYS', 7))
    guest = User(
        username=username,
        is_guest=True,
        guest_expires_at=datetime.now(timezone.utc) + timedelta(days=days),
    )
    db.session.add(guest)
    db.session.commit()
    login_user(guest)
    return jsonify({"success": True, "user": guest.to_dict()}), 201


@auth.route('/register', methods=['POST'])
def register():
    data = json_body()
    username = (data.get('username') or '').strip()
    password = data.get('password')
    if not username or not password:
        return jsonify({"success": False, "error": "Missing username or password"}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({"success": False, "error": "Username already exists"}), 400

    new_user = User(username=username, password_hash=bcrypt.generate_password_hash(password).decode('utf-8'))
    db.session.add(new_user)
    db.session.commit()
    login_user(new_user)
    return jsonify({"success": True, "user": new_user.to_dict()}), 201


@auth.route('/login', methods=['POST'])
def login():
    data = json_body()
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.password_hash and bcrypt.check_password_hash(user.password_hash, data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({"success": True, "user": user.to_dict()})
    return jsonify({"success": False, "error": "Invalid credentials"}), 401


@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@auth.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({"success": True, "user": current_user.to_dict()})
