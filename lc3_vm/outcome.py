"""
LC-3 Virtual Machine - Instruction Outcomes

Every instruction handler returns a StepResult telling the control
loop what happened:

  CONTINUE      fall through to the next word
  BRANCH_TAKEN  PC was replaced (taken BR, JMP/RET, JSR/JSRR)
  HALTED        HALT trap ran; no further instructions execute
  FAULTED       illegal opcode or unknown trap vector; `reason` says which

The run loop reduces these to a StopReason.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Outcome(Enum):
    CONTINUE = 'CONTINUE'
    BRANCH_TAKEN = 'BRANCH_TAKEN'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


class StopReason(Enum):
    HALT = 'HALT'       # HALT trap
    FAULT = 'FAULT'     # illegal opcode / unknown trap vector
    LIMIT = 'LIMIT'     # max_instructions reached


@dataclass(frozen=True)
class StepResult:
    outcome: Outcome
    reason: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.outcome in (Outcome.HALTED, Outcome.FAULTED)

    @classmethod
    def faulted(cls, reason: str) -> 'StepResult':
        return cls(Outcome.FAULTED, reason)


CONTINUE = StepResult(Outcome.CONTINUE)
BRANCH_TAKEN = StepResult(Outcome.BRANCH_TAKEN)
HALTED = StepResult(Outcome.HALTED)
