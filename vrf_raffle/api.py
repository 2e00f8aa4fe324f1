"""
Raffle Query API
Read-only raffle state over HTTP, plus the public upkeep endpoints a
recurring trigger service can call
"""

from flask import Flask

from utils.error_helpers import api_error_handler, json_success


def create_app(raffle, history=None, allow_upkeep=True):
    """
    Build the Flask app serving one raffle

    Args:
        raffle: Raffle to expose
        history: Optional RaffleHistory backing /raffle/history
        allow_upkeep: Serve POST /raffle/upkeep; leave off when an upkeep
            loop in the same process is already the trigger service

    Returns:
        Flask: Configured application
    """
    app = Flask(__name__)

    @app.route('/health')
    def health():
        return json_success(status='healthy')

    @app.route('/raffle')
    @api_error_handler
    def raffle_summary():
        return json_success(raffle.summary())

    @app.route('/raffle/players')
    @api_error_handler
    def players():
        return json_success(raffle.get_players(), count=raffle.get_number_of_players())

    @app.route('/raffle/players/<int:index>')
    @api_error_handler
    def player(index):
        return json_success({'index': index, 'player': raffle.get_player(index)})

    @app.route('/raffle/entered/<player>')
    @api_error_handler
    def entered(player):
        return json_success({'player': player, 'entered': raffle.has_entered(player)})

    @app.route('/raffle/upkeep', methods=['GET'])
    @api_error_handler
    def check_upkeep():
        upkeep_needed, perform_data = raffle.is_ready()
        return json_success({'upkeep_needed': upkeep_needed, 'perform_data': perform_data.hex()})

    if allow_upkeep:
        @app.route('/raffle/upkeep', methods=['POST'])
        @api_error_handler
        def perform_upkeep():
            request_id = raffle.execute()
            return json_success({'request_id': request_id}, message='Winner requested')

    @app.route('/raffle/history')
    @api_error_handler
    def draw_history():
        if history is None:
            raise LookupError("Draw history is not configured")
        draws = history.get_draw_history(limit=10)
        for draw in draws:
            draw['prize'] = str(draw['prize'])
            draw['random_word'] = str(draw['random_word'])
            draw['drawn_at'] = str(draw['drawn_at'])
        return json_success(draws)

    return app
