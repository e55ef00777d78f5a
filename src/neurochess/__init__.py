"""
NeuroChess Arena package.

Components:
- game: GameSession state machine (turns, status, race-safe commit of AI moves)
- autoplay: AutoPlayScheduler chaining AI moves while both seats are AI
- move_request: MoveRequestPipeline (prompt -> provider -> retry/backoff -> extract -> validate)
- response_extractor/prompting: free-form reply parsing and provider-agnostic prompts
- providers: ProviderRegistry plus one adapter per backend wire dialect
- referee: python-chess backed rules oracle and PGN export
- llm_client: httpx transport for provider requests
"""
# Package exports are intentionally minimal; import modules directly as needed.
