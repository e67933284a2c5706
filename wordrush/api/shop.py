from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from wordrush import db
from wordrush.errors import InvalidInput, TransientFailure
from wordrush.services.words.ledger import AccountLedger


shop = Blueprint('shop', __name__)


@shop.route('/buy-swap', methods=['POST'])
@login_required
def buy_swap():
    data = request.get_json(silent=True) or {}
    packs = current_app.config.get('SWAP_PACKS') or {}
    pack = data.get('pack')
    if isinstance(pack, bool) or not isinstance(pack, int) or pack not in packs:
        raise InvalidInput(f"pack must be one of {sorted(packs)}")

    ledger = AccountLedger(free_swaps_per_day=int(current_app.config.get('FREE_SWAPS_PER_DAY', 3)))
    user = ledger.buy_swaps(current_user.id, pack, packs[pack])
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise TransientFailure() from exc
    current_app.logger.info(f"[shop-swap] user={user.id} pack={pack} cost={packs[pack]} gems={user.gems}")
    return jsonify({
        'gems': user.gems,
        'free_swaps_left': user.free_swaps_left,
    })
