"""
Daily content jobs: recovery verses, missions, Bible facts, verse memory,
Bible characters, quiz and timed quiz questions, and the verse of the day.

These are low-priority and best-effort. None of them raises: failures are
logged and answered with a local fallback (or None where no fallback
exists). Jobs that consult the quota cooldown skip AI entirely while it is
armed.
"""

import logging
import random
from datetime import date
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from models.study_models import (
    BibleCharacter,
    BibleFact,
    DailyMission,
    DailyVerse,
    QuizQuestion,
    RecoveryVerse,
    VerseMemory,
)
from prompts.study_prompts import (
    build_bible_character_prompt,
    build_bible_fact_prompt,
    build_daily_missions_prompt,
    build_daily_verse_prompt,
    build_quiz_questions_prompt,
    build_recovery_verses_prompt,
    build_timed_quiz_prompt,
    build_verse_memory_prompt,
)
from services.ai_executor import generate_with_ai
from utils.exceptions import ModelsExhaustedError
from utils.json_repair import safe_json_parse
from utils.model_config import AIProvider, KEY_SLOTS, ModelConfig
from utils.quota import QuotaCooldown, is_quota_error

logger = logging.getLogger(__name__)


LOCAL_RECOVERY_VERSES = [
    {
        "verse": "Não temas, porque eu sou contigo; não te assombres, porque eu sou o teu Deus; eu te fortaleço, e te ajudo, e te sustento com a destra da minha justiça.",
        "reference": "Isaías 41:10 (ARA)",
        "reflection": "Deus está sempre conosco, mesmo nos momentos mais difíceis.",
    },
    {
        "verse": "Vinde a mim, todos os que estais cansados e sobrecarregados, e eu vos aliviarei.",
        "reference": "Mateus 11:28 (ARA)",
        "reflection": "Jesus oferece descanso para nossa alma cansada.",
    },
    {
        "verse": "Lançando sobre ele toda a vossa ansiedade, porque ele tem cuidado de vós.",
        "reference": "1 Pedro 5:7 (ARA)",
        "reflection": "Podemos entregar nossas preocupações a Deus, pois Ele cuida de nós.",
    },
    {
        "verse": "Mas os que esperam no Senhor renovam as suas forças, sobem com asas como águias, correm e não se cansam, caminham e não se fatigam.",
        "reference": "Isaías 40:31 (ARA)",
        "reflection": "A espera em Deus renova nossas forças espirituais.",
    },
    {
        "verse": "O Senhor é o meu pastor; nada me faltará.",
        "reference": "Salmos 23:1 (ARA)",
        "reflection": "Com Deus como nosso guia, nada nos faltará.",
    },
]

FALLBACK_MISSION_TEMPLATES = [
    {"title": "Leitura Matinal", "description": "Leia um capítulo do livro de Provérbios", "xpReward": 10, "type": "easy"},
    {"title": "Oração Intercessória", "description": "Ore por 5 pessoas diferentes da sua comunidade", "xpReward": 25, "type": "medium"},
    {"title": "Estudo Bíblico", "description": "Faça um estudo aprofundado sobre um versículo", "xpReward": 50, "type": "hard"},
    {"title": "Versículo do Dia", "description": "Memorize um versículo bíblico e medite nele", "xpReward": 10, "type": "easy"},
    {"title": "Ato de Bondade", "description": "Pratique um ato de bondade com alguém hoje", "xpReward": 25, "type": "medium"},
    {"title": "Jejum e Oração", "description": "Faça um jejum parcial e dedique o tempo à oração", "xpReward": 50, "type": "hard"},
    {"title": "Gratidão", "description": "Escreva 3 coisas pelas quais você é grato hoje", "xpReward": 10, "type": "easy"},
    {"title": "Compartilhar a Fé", "description": "Compartilhe uma mensagem de encorajamento", "xpReward": 25, "type": "medium"},
    {"title": "Servir ao Próximo", "description": "Ajude alguém necessitado de forma prática", "xpReward": 50, "type": "hard"},
    {"title": "Louvor Matinal", "description": "Comece o dia ouvindo ou cantando um hino", "xpReward": 10, "type": "easy"},
    {"title": "Leitura dos Salmos", "description": "Leia 3 Salmos e reflita sobre eles", "xpReward": 25, "type": "medium"},
    {"title": "Ensino Bíblico", "description": "Ensine um princípio bíblico a alguém", "xpReward": 50, "type": "hard"},
    {"title": "Oração em Família", "description": "Faça uma oração com sua família", "xpReward": 10, "type": "easy"},
    {"title": "Visitação", "description": "Visite ou ligue para alguém que precisa de apoio", "xpReward": 25, "type": "medium"},
    {"title": "Evangelismo", "description": "Compartilhe o evangelho com uma pessoa", "xpReward": 50, "type": "hard"},
    {"title": "Momento de Silêncio", "description": "Dedique 10 minutos em silêncio com Deus", "xpReward": 10, "type": "easy"},
    {"title": "Perdão", "description": "Perdoe alguém que te magoou e ore por essa pessoa", "xpReward": 25, "type": "medium"},
    {"title": "Confissão", "description": "Faça uma reflexão honesta sobre seus pecados e confesse a Deus", "xpReward": 50, "type": "hard"},
]

FALLBACK_BIBLE_FACTS = [
    {"fact": "A Bíblia foi escrita por aproximadamente 40 autores diferentes ao longo de 1.500 anos.", "category": "história"},
    {"fact": "O livro de Ester é o único livro da Bíblia que não menciona o nome de Deus.", "category": "curiosidade"},
    {"fact": "O versículo mais curto da Bíblia em português é 'Jesus chorou' (João 11:35).", "category": "curiosidade"},
    {"fact": "O Salmo 119 é o capítulo mais longo da Bíblia, com 176 versículos.", "category": "números"},
    {"fact": "A palavra 'Bíblia' vem do grego 'biblion', que significa 'livros'.", "category": "etimologia"},
    {"fact": "Matusalém é a pessoa mais velha mencionada na Bíblia, vivendo 969 anos.", "category": "personagens"},
    {"fact": "O livro de Jó é considerado um dos mais antigos da Bíblia.", "category": "história"},
    {"fact": "A Bíblia foi o primeiro grande livro impresso por Gutenberg, por volta de 1455.", "category": "história"},
    {"fact": "O Antigo Testamento foi escrito principalmente em hebraico e o Novo em grego.", "category": "idiomas"},
    {"fact": "Jesus citou o livro de Deuteronômio com frequência, inclusive nas tentações no deserto.", "category": "Jesus"},
    {"fact": "O apóstolo Paulo escreveu 13 das 27 cartas do Novo Testamento.", "category": "autores"},
    {"fact": "A palavra 'amor' aparece centenas de vezes na Bíblia.", "category": "palavras"},
    {"fact": "O Monte das Oliveiras é mencionado diversas vezes nos Evangelhos e nos profetas.", "category": "lugares"},
    {"fact": "Noé tinha 600 anos quando começou o dilúvio.", "category": "personagens"},
    {"fact": "A arca de Noé tinha aproximadamente 137 metros de comprimento.", "category": "números"},
    {"fact": "O nome 'Jesus' significa 'o Senhor salva' em hebraico.", "category": "etimologia"},
    {"fact": "O livro de Apocalipse contém 404 versículos e 22 capítulos.", "category": "números"},
    {"fact": "Davi foi ungido rei três vezes diferentes.", "category": "personagens"},
    {"fact": "A rainha de Sabá fez uma longa viagem para conhecer a sabedoria de Salomão.", "category": "viagens"},
    {"fact": "O profeta Isaías é um dos profetas mais citados no Novo Testamento.", "category": "profetas"},
    {"fact": "Pedro é mencionado mais vezes que qualquer outro apóstolo nos Evangelhos.", "category": "personagens"},
    {"fact": "Jesus jejuou 40 dias no deserto antes de iniciar seu ministério.", "category": "Jesus"},
    {"fact": "O templo de Salomão levou 7 anos para ser construído.", "category": "construções"},
    {"fact": "A palavra 'aleluia' significa 'louvai ao Senhor' em hebraico.", "category": "palavras"},
    {"fact": "Abraão tinha 100 anos quando Isaque nasceu.", "category": "personagens"},
    {"fact": "O livro de Provérbios contém 31 capítulos, um para cada dia do mês.", "category": "números"},
    {"fact": "O êxodo envolveu uma multidão de israelitas liderados por Moisés através do deserto.", "category": "números"},
    {"fact": "O rio Jordão é um dos rios mais mencionados na Bíblia.", "category": "lugares"},
    {"fact": "Daniel era já idoso quando foi lançado na cova dos leões.", "category": "personagens"},
    {"fact": "Uma das últimas palavras de Jesus na cruz foi 'Está consumado' (João 19:30).", "category": "Jesus"},
]

FALLBACK_VERSE_MEMORY = [
    {"reference": "João 3:16", "fullVerse": "Porque Deus amou o mundo de tal maneira que deu o seu Filho unigênito, para que todo aquele que nele crê não pereça, mas tenha a vida eterna.", "blanks": ["Deus", "Filho", "crê", "vida"]},
    {"reference": "Salmos 23:1", "fullVerse": "O Senhor é o meu pastor; nada me faltará.", "blanks": ["Senhor", "pastor", "nada", "faltará"]},
    {"reference": "Filipenses 4:13", "fullVerse": "Posso todas as coisas naquele que me fortalece.", "blanks": ["todas", "coisas", "fortalece"]},
    {"reference": "Provérbios 3:5", "fullVerse": "Confia no Senhor de todo o teu coração e não te estribes no teu próprio entendimento.", "blanks": ["Confia", "Senhor", "coração", "entendimento"]},
    {"reference": "Romanos 8:28", "fullVerse": "Sabemos que todas as coisas cooperam para o bem daqueles que amam a Deus.", "blanks": ["todas", "cooperam", "bem", "amam"]},
    {"reference": "Isaías 41:10", "fullVerse": "Não temas, porque eu sou contigo; não te assombres, porque eu sou o teu Deus.", "blanks": ["temas", "contigo", "assombres", "Deus"]},
    {"reference": "Mateus 6:33", "fullVerse": "Buscai primeiro o Reino de Deus e a sua justiça, e todas estas coisas vos serão acrescentadas.", "blanks": ["Buscai", "Reino", "justiça", "acrescentadas"]},
    {"reference": "Jeremias 29:11", "fullVerse": "Porque eu bem sei os pensamentos que tenho a vosso respeito, diz o Senhor; pensamentos de paz e não de mal, para vos dar o fim que esperais.", "blanks": ["pensamentos", "paz", "mal", "esperais"]},
]

MISSION_DIFFICULTIES = ("easy", "medium", "hard")
BIBLE_CHARACTER_FIELDS = ("name", "description", "verse", "fact")

# (system_prompt, user_prompt, gemini_key=...) -> extracted JSON text
Generator = Callable[..., Awaitable[str]]
T = TypeVar("T")


def _items(parsed: Any, key: str, minimum: int) -> Optional[List[Any]]:
    """parsed[key] when it is a list of at least `minimum` entries"""
    items = parsed.get(key) if isinstance(parsed, dict) else None
    if isinstance(items, list) and len(items) >= minimum:
        return items
    return None


class DailyContentService:
    """Best-effort AI jobs with local fallbacks."""

    def __init__(
        self,
        cooldown: Optional[QuotaCooldown] = None,
        generate: Optional[Generator] = None,
        is_configured: Optional[Callable[[], bool]] = None,
        rng: Optional[random.Random] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.cooldown = cooldown or QuotaCooldown()
        self._generate = generate or generate_with_ai
        self._is_configured = is_configured or (lambda: ModelConfig.is_configured(AIProvider.GEMINI.value))
        self._rng = rng or random.Random()
        self._today = today or date.today

    async def _ask(self, system_prompt: str, user_prompt: str, key_slot: str = "1") -> Any:
        content = await self._generate(
            system_prompt, user_prompt,
            provider=AIProvider.GEMINI.value, gemini_key=key_slot,
        )
        return safe_json_parse(content)

    def _note_failure(self, job: str, error: Exception) -> None:
        """Log a failed call; quota-like errors arm the cooldown"""
        if is_quota_error(error) or isinstance(error, ModelsExhaustedError):
            self.cooldown.mark_exhausted()
            logger.info(f"[{job}] AI quota exceeded, using local fallback")
        else:
            logger.error(f"[{job}] AI error: {error}")

    def _ai_allowed(self, job: str) -> bool:
        """Configured and outside the quota cooldown"""
        if not self._is_configured():
            return False
        if not self.cooldown.is_available():
            logger.info(f"[{job}] Skipping AI (quota cooldown), using local fallback")
            return False
        return True

    async def _rotate_keys(
        self,
        job: str,
        system_prompt: str,
        user_prompt: str,
        build: Callable[[Any], Optional[T]],
    ) -> Optional[T]:
        """
        Ask with each key slot in turn. The first payload that build()
        accepts (returns non-None without raising) wins; None when every
        key fails.
        """
        for key_slot in KEY_SLOTS:
            try:
                parsed = await self._ask(system_prompt, user_prompt, key_slot)
                result = build(parsed)
                if result is not None:
                    logger.info(f"[{job}] Successfully generated with AI (key {key_slot})")
                    return result
                logger.info(f"[{job}] Key {key_slot} returned invalid format, trying next key...")
            except Exception as e:
                if is_quota_error(e):
                    logger.info(f"[{job}] Key {key_slot} quota exceeded, trying next key...")
                else:
                    logger.error(f"[{job}] Key {key_slot} error: {e}")
        return None

    # ================================================================
    # Recovery verses
    # ================================================================

    async def generate_recovery_verses(self, count: int = 5) -> List[RecoveryVerse]:
        if self._ai_allowed("Recovery Verses"):
            try:
                parsed = await self._ask(*build_recovery_verses_prompt(count))
                verses = _items(parsed, "verses", 1)
                if verses:
                    logger.info("[Recovery Verses] Successfully generated with AI")
                    return [RecoveryVerse.model_validate(v) for v in verses]
            except Exception as e:
                self._note_failure("Recovery Verses", e)

        sample = self._rng.sample(LOCAL_RECOVERY_VERSES, min(count, len(LOCAL_RECOVERY_VERSES)))
        return [RecoveryVerse.model_validate(v) for v in sample]

    # ================================================================
    # Cooldown-gated jobs with a local fallback
    # ================================================================

    async def generate_daily_missions(self) -> List[DailyMission]:
        """
        Three missions for today. Tries every key slot in turn; when all of
        them fail the cooldown is armed and one easy, one medium and one hard
        local template are returned.
        """
        if self._ai_allowed("Daily Missions"):
            missions = await self._rotate_keys(
                "Daily Missions",
                *build_daily_missions_prompt(self._today()),
                build=lambda parsed: [DailyMission.model_validate(m) for m in _items(parsed, "missions", 3) or []] or None,
            )
            if missions:
                return missions
            self.cooldown.mark_exhausted()
            logger.info("[Daily Missions] All keys exhausted, using local fallback")

        return self._fallback_missions()

    def _fallback_missions(self) -> List[DailyMission]:
        shuffled = list(FALLBACK_MISSION_TEMPLATES)
        self._rng.shuffle(shuffled)

        missions = []
        for difficulty in MISSION_DIFFICULTIES:
            template = next(m for m in shuffled if m["type"] == difficulty)
            missions.append(DailyMission.model_validate(template))
        return missions

    async def generate_bible_fact(self) -> BibleFact:
        if self._ai_allowed("Bible Fact"):
            fact = await self._rotate_keys(
                "Bible Fact",
                *build_bible_fact_prompt(self._today(), self._rng.randrange(1000)),
                build=lambda parsed: BibleFact.model_validate(parsed) if isinstance(parsed, dict) and parsed.get("fact") else None,
            )
            if fact:
                return fact
            self.cooldown.mark_exhausted()
            logger.info("[Bible Fact] All keys exhausted, using local fallback")

        return BibleFact.model_validate(self._rng.choice(FALLBACK_BIBLE_FACTS))

    async def generate_verse_memory(self) -> VerseMemory:
        """A verse with 3+ key words to blank out, from AI or the local list"""
        if self._ai_allowed("Verse Memory"):
            verse = await self._rotate_keys(
                "Verse Memory",
                *build_verse_memory_prompt(self._today(), self._rng.randrange(1000)),
                build=lambda parsed: VerseMemory.model_validate(parsed) if isinstance(parsed, dict) else None,
            )
            if verse:
                return verse
            self.cooldown.mark_exhausted()
            logger.info("[Verse Memory] All keys exhausted, using local fallback")

        return VerseMemory.model_validate(self._rng.choice(FALLBACK_VERSE_MEMORY))

    # ================================================================
    # Jobs without a local fallback (None when every key fails)
    # ================================================================

    async def generate_quiz_questions(self, count: int = 5) -> Optional[List[QuizQuestion]]:
        return await self._generate_quiz(
            "Quiz Questions", count,
            *build_quiz_questions_prompt(count, self._today(), self._rng.randrange(1000)),
        )

    async def generate_timed_quiz(self, count: int = 5) -> Optional[List[QuizQuestion]]:
        """Short, fast questions for the timed quiz"""
        return await self._generate_quiz(
            "Timed Quiz", count,
            *build_timed_quiz_prompt(count, self._today(), self._rng.randrange(1000)),
        )

    async def _generate_quiz(
        self, job: str, count: int, system_prompt: str, user_prompt: str,
    ) -> Optional[List[QuizQuestion]]:
        if not self._is_configured():
            logger.info(f"[{job}] AI not configured, cannot generate")
            return None

        questions = await self._rotate_keys(
            job, system_prompt, user_prompt,
            build=lambda parsed: [QuizQuestion.model_validate(q) for q in (_items(parsed, "questions", count) or [])[:count]] or None,
        )
        if questions is None:
            logger.error(f"[{job}] All keys exhausted, no questions generated")
        return questions

    async def generate_bible_character(self) -> Optional[BibleCharacter]:
        if not self._is_configured():
            logger.info("[Bible Character] AI not configured, cannot generate")
            return None

        character = await self._rotate_keys(
            "Bible Character",
            *build_bible_character_prompt(self._today(), self._rng.randrange(1000)),
            build=lambda parsed: (
                BibleCharacter.model_validate(parsed)
                if isinstance(parsed, dict) and all(parsed.get(f) for f in BIBLE_CHARACTER_FIELDS)
                else None
            ),
        )
        if character is None:
            logger.error("[Bible Character] All keys exhausted, no character generated")
        return character

    async def generate_daily_verse(self) -> Optional[DailyVerse]:
        if not self._is_configured():
            logger.info("[Daily Verse] AI not configured")
            return None

        try:
            parsed = await self._ask(*build_daily_verse_prompt(self._today()))
            return DailyVerse.model_validate(parsed)
        except Exception as e:
            logger.error(f"[Daily Verse] Error generating daily verse: {e}")
            return None
