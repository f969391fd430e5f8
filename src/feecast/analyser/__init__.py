from typing import Optional, Type, Union
from feecast.analyser.base_analyser import BaseAnalyser
from feecast.analyser.holt_winters_analyser import HoltWintersAnalyser
from feecast.config import AnalyserConfig

ANALYSERS = {
    HoltWintersAnalyser.key: HoltWintersAnalyser,
}


def register_analyser(analyser_class: Type[BaseAnalyser]) -> Type[BaseAnalyser]:
    """
    Add an analyser class to :data:`ANALYSERS` under its `key`. Can be used as
    a class decorator.
    """
    if not analyser_class.key:
        raise ValueError(f"{analyser_class.__name__} has no key.")
    if ANALYSERS.get(analyser_class.key, analyser_class) is not analyser_class:
        raise ValueError(f"Analyser key already registered: {analyser_class.key!r}")
    ANALYSERS[analyser_class.key] = analyser_class
    return analyser_class


def create_analyser(
    key: str, config: Optional[Union[AnalyserConfig, dict]] = None
) -> BaseAnalyser:
    """
    Instantiate the analyser registered under `key`.

    Raises:
        KeyError: If no analyser is registered under `key`.
    """
    try:
        analyser_class = ANALYSERS[key]
    except KeyError:
        raise KeyError(f"Unknown analyser: {key!r}") from None
    return analyser_class(config)
