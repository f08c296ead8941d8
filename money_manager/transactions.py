# money_manager/transactions.py

from flask import Blueprint, Response, jsonify
from flask_jwt_extended import current_user, jwt_required

from . import ledger
from .auth import json_body

bp = Blueprint("transactions", __name__, url_prefix="/transactions")


@bp.route("", methods=["GET"])
@jwt_required()
def get_transactions():
    items, summary = ledger.list_transactions(current_user.id)
    return jsonify({
        "success": True,
        "count": len(items),
        "data": [t.to_dict() for t in items],
        "summary": summary,
    })


@bp.route("", methods=["POST"])
@jwt_required()
def add_transaction():
    data = json_body()
    tx = ledger.create_transaction(
        current_user.id, data.get("title"), data.get("amount"), data.get("type"), data.get("date")
    )
    return jsonify({"success": True, "data": tx.to_dict()}), 201


@bp.route("", methods=["DELETE"])
@jwt_required()
def delete_all_transactions():
    count = ledger.delete_all_transactions(current_user.id)
    return jsonify({
        "success": True,
        "data": {},
        "count": count,
        "message": "All transactions deleted",
    })


@bp.route("/export", methods=["GET"])
@jwt_required()
def export_transactions():
    csv_text = ledger.export_csv(current_user.id)
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=transactions.csv"},
    )


@bp.route("/<tx_id>", methods=["GET"])
@jwt_required()
def get_single_transaction(tx_id):
    tx = ledger.get_transaction(current_user.id, tx_id)
    return jsonify({"success": True, "data": tx.to_dict()})


@bp.route("/<tx_id>", methods=["PUT"])
@jwt_required()
def update_transaction(tx_id):
    data = json_body()
    tx = ledger.update_transaction(
        current_user.id, tx_id, data.get("title"), data.get("amount"), data.get("type")
    )
    return jsonify({"success": True, "data": tx.to_dict()})


@bp.route("/<tx_id>", methods=["DELETE"])
@jwt_required()
def delete_transaction(tx_id):
    ledger.delete_transaction(current_user.id, tx_id)
    return jsonify({"success": True, "data": {}})
