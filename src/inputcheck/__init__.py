"""InputCheck: question classification & composition pipeline.

주요 컴포넌트:
- InputCheckPipeline: 원문 질문 → 검증된 OutputRecord (sync run / async arun)
- Normalizer: 질문 정규화 (dominant intent + sub-intents)
- OpenAIChatCall / AsyncOpenAIChatCall: Generator 어댑터 (선택적, openai 필요)
"""

__all__ = [
    # Pipeline
    "InputCheckPipeline",
    "check_question",
    # Building blocks
    "Normalizer",
    "load_settings",
    "get_settings",
    # Generators (optional)
    "OpenAIChatCall",
    "AsyncOpenAIChatCall",
    # Errors
    "GeneratorUnavailable",
    "RecordRejected",
]


def __getattr__(name: str):
    """Lazy loading to avoid importing openai until needed."""
    if name in ("InputCheckPipeline", "check_question"):
        from inputcheck.pipeline import InputCheckPipeline, check_question

        return {"InputCheckPipeline": InputCheckPipeline, "check_question": check_question}[name]
    elif name == "Normalizer":
        from inputcheck.normalizer import Normalizer

        return Normalizer
    elif name in ("load_settings", "get_settings"):
        from inputcheck.config import get_settings, load_settings

        return {"load_settings": load_settings, "get_settings": get_settings}[name]
    elif name in ("OpenAIChatCall", "AsyncOpenAIChatCall"):
        from inputcheck.generators import AsyncOpenAIChatCall, OpenAIChatCall

        return {"OpenAIChatCall": OpenAIChatCall, "AsyncOpenAIChatCall": AsyncOpenAIChatCall}[name]
    elif name in ("GeneratorUnavailable", "RecordRejected"):
        from inputcheck.errors import GeneratorUnavailable, RecordRejected

        return {"GeneratorUnavailable": GeneratorUnavailable, "RecordRejected": RecordRejected}[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
