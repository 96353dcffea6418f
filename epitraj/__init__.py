"""epitraj: Within-host disease progression for agent-based epidemic models.

Turns a day-indexed infectivity/symptom trajectory into the transition
dates of a single infection episode:
  - Latent → infectious → symptomatic/asymptomatic → recovered → immune-waned
  - Daily advancement with one-shot host notifications
  - Intervention effects that reshape the trajectory and re-derive dates
  - Case-fatality evaluation and multi-strain mutation bookkeeping
"""

__version__ = "0.1.0"
