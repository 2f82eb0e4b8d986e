"""Story-to-shot planning: shot plans, runtime fit, and video prompts."""
