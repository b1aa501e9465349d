from companion.enums.growth import AttemptPhase, AttemptResult, FrameKind, OutcomeKind

__all__ = ["AttemptPhase", "AttemptResult", "FrameKind", "OutcomeKind"]
