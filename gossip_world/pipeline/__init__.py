"""Story-mining and chat-orchestration pipeline.

Stages, leaf first:
  persona       - human profile → persona text + system prompt; ensure_actor
  orchestrator  - one chat round: 2–4 speakers in sequence, context fold
  miner         - transcript → model classification → story candidates
  publisher     - candidate → Story + Gossip article + trend-tag upsert
  instant       - operator-triggered roast / ship / hype articles
  flow          - round → mine → publish candidates at the publish threshold

Every model call goes through an injected Gateway, every credential through
an injected CredentialSource. Per-unit failures are logged and reported as
Skipped outcomes, never raised to the caller.
"""

from .flow import PUBLISH_THRESHOLD, FlowReport, generate_chat, publishable  # noqa: F401
from .instant import NO_PAIRING, generate_debate, generate_instant_gossip  # noqa: F401
from .miner import mine_stories, parse_stories, resolve_candidates  # noqa: F401
from .orchestrator import (  # noqa: F401
    DEFAULT_ROOMS,
    init_default_rooms,
    run_round,
    select_speakers,
)
from .outcomes import Outcome, RoundReport, Skipped, Success  # noqa: F401
from .parsing import Malformed, Parsed, parse_model_json  # noqa: F401
from .persona import (  # noqa: F401
    ActorError,
    build_persona,
    build_system_prompt,
    ensure_actor,
)
from .publisher import PublishError, publish_candidate, trend_tag  # noqa: F401
