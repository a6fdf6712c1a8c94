"""mathtutor quickstart: ask the tutor one question with all tools enabled."""

import asyncio

from mathtutor import (
    ClaudeProvider,
    ConversationLoop,
    ConversationTurn,
    Message,
    SandboxedExecutor,
    TutorConfig,
    create_default_registry,
)

config = TutorConfig.from_env()
executor = SandboxedExecutor(config.sandbox)
loop = ConversationLoop(config, ClaudeProvider(config.provider), create_default_registry(executor))

turn = ConversationTurn.from_messages([Message(role="user", content="Plot the first five squares")])
reply = asyncio.run(loop.run(turn))
executor.close()

print(reply.reply)
if reply.side_output is not None:
    print(f"\n{reply.side_output.kind}: {reply.side_output.to_client_payload()}")
