from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from wordrush.errors import InvalidInput
from wordrush.services.words.engine import RoundEngine
from wordrush.services.words.scheduler import emit_round_finished, schedule_round_timeout


game = Blueprint('game', __name__)


def _engine() -> RoundEngine:
    return RoundEngine.from_app(current_app._get_current_object())


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('JSON object expected')
    return data


def _session_id(data: dict):
    session_id = data.get('session_id')
    if isinstance(session_id, bool) or not isinstance(session_id, int):
        raise InvalidInput('session_id is required and must be an integer')
    return session_id


@game.route('/start', methods=['POST'])
@login_required
def start_round():
    view = _engine().start(current_user.id)
    schedule_round_timeout(current_app._get_current_object(), view.session.id)
    return jsonify({
        'session_id': view.session.id,
        'letters': view.session.letter_list,
        'round_seconds': int(current_app.config.get('ROUND_SECONDS', 100)),
        'hint_words': [],
        **view.account_dict(),
    })


@game.route('/swap', methods=['POST'])
@login_required
def swap_letters():
    view = _engine().swap(current_user.id, _session_id(_payload()))
    return jsonify({
        'letters': view.session.letter_list,
        'swaps_used': view.session.swaps_used,
        'hint_words': view.hint_words,
        **view.account_dict(),
    })


@game.route('/reveal-hints', methods=['POST'])
@login_required
def reveal_hints():
    view = _engine().reveal_hints(current_user.id, _session_id(_payload()))
    return jsonify({
        'hint_words': view.hint_words,
        **view.account_dict(),
    })


@game.route('/check-word', methods=['POST'])
@login_required
def check_word():
    data = _payload()
    if 'word' not in data:
        raise InvalidInput('word is required')
    word = _engine().check_word(current_user.id, _session_id(data), data.get('word'))
    return jsonify({'word': word})


@game.route('/submit', methods=['POST'])
@login_required
def submit_round():
    data = _payload()
    if 'duration_seconds' not in data:
        raise InvalidInput('duration_seconds is required')
    view = _engine().submit(
        current_user.id,
        _session_id(data),
        data.get('words'),
        data.get('duration_seconds'),
    )
    session = view.session
    if view.frozen:
        return jsonify({
            'score': session.score,
            'gems_earned': session.gems_earned,
            'letters': session.letter_list,
            'words': session.word_list,
            'completed': True,
        })
    emit_round_finished(session)
    return jsonify({
        'score': session.score,
        'gems_earned': session.gems_earned,
        'gems_total': view.user.gems,
        'free_swaps_left': view.user.free_swaps_left,
        'words': session.word_list,
        'completed': True,
    })


@game.route('/sessions/<int:session_id>', methods=['GET'])
@login_required
def get_round(session_id):
    view = _engine().state(current_user.id, session_id)
    payload = view.session.to_dict()
    payload['hint_words'] = view.hint_words
    payload['round_seconds'] = int(current_app.config.get('ROUND_SECONDS', 100))
    payload.update(view.account_dict())
    return jsonify(payload)
