from .game_state import GameSession, Phase, Feedback
