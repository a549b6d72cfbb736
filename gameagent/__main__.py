import asyncio
import logging
from argparse import ArgumentParser
from pathlib import Path

from openai import AsyncOpenAI
from pyaml_env import parse_config as parse_config_with_env

from gameagent.agent import GameAgent
from gameagent.config.game import GameAgentConfig
from gameagent.tracer import Tracer, YAMLExporter
from gameagent.voice import VoiceCommandHandler

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> GameAgentConfig:
    with open(config_path, 'r', encoding='utf-8') as f:
        config = parse_config_with_env(data=f, tag=None)
    config = GameAgentConfig.model_validate(config)
    logger.debug(f"Loaded config: {config}")
    return config


def configure_logging(verbosity: int | None):
    if not verbosity:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level)
    if level > logging.DEBUG:
        logging.getLogger('httpx').setLevel(logging.WARNING)
        logging.getLogger('openai').setLevel(logging.WARNING)


async def run_voice(agent: GameAgent, config: GameAgentConfig, audio_path: str):
    if config.voice is None:
        raise SystemExit("A 'voice' section is required in the configuration to handle audio")
    openai_client = AsyncOpenAI(api_key=config.voice.api_key)
    try:
        handler = VoiceCommandHandler(agent.client, agent.market_data, openai_client, model=config.voice.model)
        result = await handler.listen(Path(audio_path).read_bytes())
    finally:
        await openai_client.close()
    print(f"Command: {result.command}")
    if result.tokens:
        for token in result.tokens:
            print(f"  {token.symbol or token.address}: {token.price}")
    if result.agent:
        print(f"Created agent {result.agent.id}")
    if not result.handled:
        print("Command not recognized")


async def run(config_path: str, verbosity: int | None, task: str | None, trace_dir: str | None, audio: str | None):
    configure_logging(verbosity)

    tracer = Tracer(exporter=YAMLExporter(output_dir=trace_dir)) if trace_dir else None
    tracer_token = tracer.activate() if tracer else None

    try:
        config = load_config(config_path)
        async with GameAgent.from_config(config) as agent:
            if audio:
                await run_voice(agent, config, audio)
                return
            if not task:
                raise SystemExit("A task is required unless --audio is given")
            outcome = await agent.run_task(task)
            print(f"Task {outcome.task.submission_id} {outcome.status.value} after {outcome.iterations} iteration(s)")
            if outcome.abort_reason:
                print(f"Reason: {outcome.abort_reason}")
            if outcome.last_result:
                print(f"Last result: [{outcome.last_result.status.value}] {outcome.last_result.feedback_message}")
    finally:
        if tracer and tracer_token:
            tracer.deactivate(tracer_token)


def main():
    parser = ArgumentParser('gameagent')
    parser.add_argument('--config', required=True, help="Path to the configuration file")
    parser.add_argument('-v', action='count', help="Verbosity level. -v for INFO, -vv for DEBUG")
    parser.add_argument('--trace-dir', help="Directory to write YAML task traces to")
    parser.add_argument('--audio', help="Recorded voice command to transcribe and handle")
    parser.add_argument('task', nargs='?', help="Task to submit to the agent")
    ns = parser.parse_args()
    asyncio.run(run(ns.config, ns.v, ns.task, ns.trace_dir, ns.audio))


if __name__ == "__main__":
    main()
