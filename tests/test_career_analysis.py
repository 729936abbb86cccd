import asyncio

import pytest

from career_api.career_analysis import generate_career_analysis
from career_api.errors import AnalysisTimeoutError, PersistenceError
from career_api.models import AnalyzeRequest
from career_api.persistence import IkigaiStore

REQUEST = AnalyzeRequest(
    responses={"love": "painting", "goodAt": "writing", "paidFor": "teaching", "worldNeeds": "education access"}
)


class FixedRunner:
    def __init__(self, analysis=None, delay=0.0):
        self.analysis = analysis
        self.delay = delay
        self.prompts = []

    async def run(self, prompt):
        self.prompts.append(prompt)
        await asyncio.sleep(self.delay)
        return self.analysis


def test_slow_analysis_is_bounded_by_timeout(backend, fake_supabase):
    runner = FixedRunner(delay=1.0)

    with pytest.raises(AnalysisTimeoutError) as exc:
        asyncio.run(generate_career_analysis(REQUEST, runner, IkigaiStore(backend), timeout=0.01))

    assert exc.value.status_code == 504
    assert fake_supabase.tables["ikigai_responses"] == []


def test_analytics_failure_aborts_before_report(backend, fake_supabase, sample_analysis):
    fake_supabase.fail("POST", "ikigai_analytics", 400, {"message": "analytics rejected"})

    with pytest.raises(PersistenceError, match="analytics rejected"):
        asyncio.run(generate_career_analysis(REQUEST, FixedRunner(sample_analysis), IkigaiStore(backend)))

    assert fake_supabase.tables["ikigai_reports"] == []


def test_prompt_is_built_from_request(backend, sample_analysis):
    runner = FixedRunner(sample_analysis)

    result = asyncio.run(generate_career_analysis(REQUEST, runner, IkigaiStore(backend)))

    assert result.analysis == sample_analysis
    assert "What the world NEEDS: education access" in runner.prompts[0]
