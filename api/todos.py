from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort

from api import current_storage
from models.credential_store import CredentialStore
from models.todo import Todo
from models.schemas.todo import (
    TodoCreateSchema,
    TodoUpdateSchema,
    TodoOutSchema,
)
from utils.decorators import access_token_required
from utils.security import Principal

bp = Blueprint("todos", __name__)
logger = logging.getLogger(__name__)

create_schema = TodoCreateSchema()
update_schema = TodoUpdateSchema()
out_schema = TodoOutSchema()
out_list_schema = TodoOutSchema(many=True)


def owned_todos(principal: Principal):
    """Query over the caller's todos only."""
    session = current_storage().get_session()
    return session.query(Todo).filter(Todo.user_id == principal.user_id)


def get_owned_or_404(principal: Principal, todo_id: str) -> Todo:
    todo = owned_todos(principal).filter(Todo.id == todo_id).first()
    if not todo:
        abort(404, description="Todo not found")
    return todo


@bp.post("/createusertodo")
@access_token_required()
def create_todo(principal: Principal):
    """
    Create a todo for the authenticated user
    ---
    tags: [Todos]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [content]
          properties:
            content: { type: string }
    responses:
      200: { description: Created todo }
      400: { description: content missing }
      401: { description: Missing Authorization header }
      403: { description: Invalid access token }
      404: { description: User not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    storage = current_storage()
    if not CredentialStore(storage).get(principal.user_id):
        abort(404, description="User not found")
    todo = Todo(user_id=principal.user_id, content=data["content"], completed=False)
    storage.new(todo)
    storage.save()
    logger.debug("User %s created todo %s", principal.user_id, todo.id)
    return jsonify(out_schema.dump(todo)), 200


@bp.get("/getusertodo")
@access_token_required()
def list_todos(principal: Principal):
    """
    List the authenticated user's todos
    ---
    tags: [Todos]
    security:
      - Bearer: []
    responses:
      200: { description: List of todos }
      401: { description: Missing Authorization header }
      403: { description: Invalid access token }
    """
    rows = owned_todos(principal).order_by(Todo.created_at.asc()).all()
    return jsonify(out_list_schema.dump(rows)), 200


@bp.get("/getusertodo/<todo_id>")
@access_token_required()
def get_todo(todo_id: str, principal: Principal):
    """
    Get one of the authenticated user's todos
    ---
    tags: [Todos]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Todo not found }
    """
    todo = get_owned_or_404(principal, todo_id)
    return jsonify(out_schema.dump(todo)), 200


@bp.put("/updateusertodo/<todo_id>")
@access_token_required()
def update_todo(todo_id: str, principal: Principal):
    """
    Update content and/or completed on one of the user's todos
    ---
    tags: [Todos]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
            completed: { type: boolean }
    responses:
      200: { description: Updated todo }
      400: { description: Validation error }
      404: { description: Todo not found }
    """
    todo = get_owned_or_404(principal, todo_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    for field, value in data.items():
        setattr(todo, field, value)
    storage = current_storage()
    storage.new(todo)
    storage.save()
    return jsonify(out_schema.dump(todo)), 200


@bp.delete("/deleteusertodo/<todo_id>")
@access_token_required()
def delete_todo(todo_id: str, principal: Principal):
    """
    Delete one of the user's todos; returns the deleted record
    ---
    tags: [Todos]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
    responses:
      200: { description: Deleted todo }
      404: { description: Todo not found }
    """
    todo = get_owned_or_404(principal, todo_id)
    body = out_schema.dump(todo)
    storage = current_storage()
    storage.delete(todo)
    storage.save()
    return jsonify(body), 200
