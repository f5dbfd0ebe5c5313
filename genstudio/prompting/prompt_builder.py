"""Prompt assembly helpers used by the generation services.

This module only builds prompt strings. Payload shaping, tool activation, and
model invocation happen in `genstudio.llm.service` and `genstudio.image.service`.

Design constraints:
    - Deterministic construction for identical inputs.
    - No I/O and no global state mutation.
    - User-provided values (topic, ticker, file text) are interpolated raw.
"""


# =========================================================
# FILE CONTEXT
# =========================================================
# Non-binary attachments are forwarded as labelled text so the model can tell
# file content apart from the user's own message.

def build_file_context(name: str, text: str) -> str:
    """Wrap extracted file text in a labelled context block."""
    return f'\n[Context from file "{name}":]\n{text}\n'


# =========================================================
# SLIDE OUTLINE
# =========================================================

def build_slide_outline_prompt(topic: str, count: int) -> str:
    """Build the consulting-style outline instruction.

    Args:
        topic: Presentation subject as typed by the user.
        count: Number of slides requested. The response schema cannot enforce
            this, so it is stated in the instruction only.
    """
    return (
        f"Create a McKinsey-style management consulting presentation outline about: {topic}.\n"
        f"I need exactly {count} slides.\n"
        "\n"
        "Style Guidelines:\n"
        "1. Titles must be \"Action Titles\" (complete sentences that summarize the slide's main insight).\n"
        "2. Content should be MECE (Mutually Exclusive, Collectively Exhaustive).\n"
        "3. Determine the 'sentiment' of the topic (positive, neutral, negative, urgent).\n"
        "4. Suggest a professional 'themeColor' hex code based on the sentiment "
        "(e.g., Navy for neutral, Red for urgent, Green for growth).\n"
        "\n"
        "Output JSON."
    )


# =========================================================
# EQUITY RESEARCH
# =========================================================
# Search grounding is always enabled for this route; the instruction tells the
# model to use it for live prices and news.

STOCK_ANALYST_SYSTEM_INSTRUCTION = (
    "You are a world-class financial analyst. Your analysis must be rigorous, "
    "citing numbers and specific events. Do not give generic advice."
)


def build_stock_analysis_prompt(ticker: str) -> str:
    """Build the deep-dive equity research instruction for `ticker`."""
    return (
        f"Perform a deep-dive investment analysis on {ticker}.\n"
        "\n"
        "Persona: You are a Senior Equity Research Analyst at a top-tier Wall Street hedge fund.\n"
        "Tone: Professional, Objective, Data-Driven, Critical.\n"
        "\n"
        "Requirements:\n"
        "1. Use Google Search to fetch real-time price, recent news, and financial data.\n"
        "2. Analyze Valuation (P/E, Market Cap, EV/EBITDA vs Peers).\n"
        "3. Evaluate the Competitive Moat & Growth Drivers.\n"
        "4. Assess Risks (Macro, Regulatory, Execution).\n"
        "5. Provide a Technical Analysis overview (Trends, Support/Resistance).\n"
        "6. Conclude with an Institutional Verdict: BUY, SELL, or HOLD, with a clear thesis.\n"
        "\n"
        "Format using Markdown with clear headers."
    )
