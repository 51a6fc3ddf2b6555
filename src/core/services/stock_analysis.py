"""
Stock Analysis Service.

Asks a generative text provider for a short restocking report on the
current inventory. Never raises: any failure becomes a fixed message the
shop owner can read.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.config import get_logger
from src.core.entities import StockLine
from src.core.exceptions import LedgerError
from src.core.interfaces.llm import ILLMProvider

logger = get_logger(__name__)

EMPTY_RESPONSE_MESSAGE = "Não foi possível gerar a análise no momento."
FAILURE_MESSAGE = (
    "Erro ao conectar com a IA para análise de estoque. Verifique sua chave de API."
)

PROMPT_TEMPLATE = """\
Atue como um gerente de logística especialista em lojas de baterias automotivas.
Analise o seguinte inventário atual da loja e forneça um relatório curto e estratégico (máximo 3 parágrafos).

Dados do Inventário:
{inventory_summary}

Instruções:
1. Identifique itens críticos (estoque abaixo do mínimo ou zerado).
2. Sugira ações de reposição urgentes.
3. Se o estoque estiver saudável, elogie o equilíbrio.
4. Use formatação Markdown para deixar o texto legível.
"""


@dataclass
class StockAnalysis:
    """Outcome of one advisory request."""

    report: str
    succeeded: bool
    model: str | None = None
    error: str | None = None


def summarize_inventory(lines: Sequence[StockLine]) -> str:
    """One bullet per inventory row, in the order given."""
    return "\n".join(
        f"- {line.brand.value} {line.amperage}Ah: {line.quantity} unidades "
        f"(Mínimo ideal: {line.min_stock})"
        for line in lines
    )


def build_prompt(lines: Sequence[StockLine]) -> str:
    return PROMPT_TEMPLATE.format(inventory_summary=summarize_inventory(lines))


class StockAnalysisService:
    """Stateless wrapper around an LLM provider; one attempt per call."""

    def __init__(self, llm: ILLMProvider) -> None:
        self._llm = llm

    async def analyze(self, lines: Sequence[StockLine]) -> StockAnalysis:
        prompt = build_prompt(lines)

        try:
            response = await self._llm.generate(prompt)
        except LedgerError as e:
            logger.error("stock_analysis_failed", error=e.message, code=e.code)
            return StockAnalysis(report=FAILURE_MESSAGE, succeeded=False, error=e.code)
        except Exception as e:
            logger.error("stock_analysis_failed", error=str(e), error_type=type(e).__name__)
            return StockAnalysis(report=FAILURE_MESSAGE, succeeded=False, error=type(e).__name__)

        text = (response.text or "").strip()
        if not text:
            logger.warning("stock_analysis_empty", model=response.model)
            return StockAnalysis(
                report=EMPTY_RESPONSE_MESSAGE,
                succeeded=False,
                model=response.model,
                error="EMPTY_RESPONSE",
            )

        logger.info("stock_analysis_complete", rows=len(lines), report_len=len(text))
        return StockAnalysis(report=text, succeeded=True, model=response.model)
