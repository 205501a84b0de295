"""
Minimal interactive CLI for the product image generator.

Architectural role:
- Provides a terminal-only interface over the generation orchestrator.
- Displays configured providers at startup.
- Delegates each prompt to `GenerationOrchestrator.generate`.

Request lifecycle (per prompt):
1. Read a single line from stdin.
2. Handle `exit`/`quit`.
3. Run the prompt through the default Hugging Face route. FASHN.ai fallback
   is not available here because there is no reference image.
4. Print the generated file path or the failure with setup guidance.

Error handling strategy:
- Handles EOF and keyboard interrupts without traceback output.
- Generation failures are printed and the loop continues.
"""

import asyncio
import logging
import os
import sys

from product_imagegen.core.engine import GenerationOrchestrator
from product_imagegen.core.errors import ConfigurationError, GenerationFailed, StorageError
from product_imagegen.core.generation_types import GenerationRequest
from product_imagegen.image.provider_config import ProviderSettings


def run_prompt(orchestrator: GenerationOrchestrator, prompt: str) -> str:
    """Generate one image and return the line to print."""
    try:
        result = asyncio.run(orchestrator.generate(GenerationRequest(prompt=prompt)))
    except GenerationFailed as e:
        lines = [f"Generation failed: {err}" for err in e.errors]
        lines.extend(e.setup.values())
        return "\n".join(lines)
    except (ConfigurationError, StorageError) as e:
        remediation = getattr(e, "remediation", "")
        return f"{e}\n{remediation}".strip()

    return f"[{result.used_provider.label}] {result.output_path or result.output_location}"


def main(argv=None):
    """
    Run the interactive terminal session.

    With arguments, the joined arguments are used as a single prompt and the
    session exits after one generation.
    """
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(
        level=logging.DEBUG if os.getenv("DEBUG") == "true" else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = ProviderSettings.from_env()
    orchestrator = GenerationOrchestrator(settings)

    if argv:
        print(run_prompt(orchestrator, " ".join(argv)))
        return

    print("Product Image Generator started. (Type 'exit' to quit)\n")
    print("-" * 60)
    for name, configured in settings.configured_providers().items():
        print(f"{name}: {'configured' if configured else 'not configured'}")
    print(f"Output directory: {settings.generated_dir}")
    print("-" * 60)

    while True:

        try:
            prompt = input("Prompt: ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not prompt:
            continue

        if prompt.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        print(run_prompt(orchestrator, prompt))
        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
