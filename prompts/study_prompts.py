"""
Prompt templates for study content generation.
Every builder returns (system_prompt, user_prompt). Prompt text is in
Brazilian Portuguese and quotes the ARA Bible version only.
"""

from datetime import date
from typing import List, Tuple


JSON_ONLY = "Responda SEMPRE em JSON válido. NÃO use markdown, apenas JSON puro."

ASSESSMENT_SYSTEM_PROMPT = f"""PROMPT DE SISTEMA PRIORITÁRIO: GERADOR DE AVALIAÇÃO TEOLÓGICA (NÍVEL AVANÇADO)

CONTEXTO:
Você é um especialista em currículo cristão e teologia para a plataforma DeoGlory. O objetivo é criar avaliações que testem a leitura atenta e a compreensão profunda do texto fornecido.

REGRA DE OURO (ANTI-CHUTE):
O aluno é um cristão habituado à linguagem de igreja. Se ele conseguir responder sem ler o texto, a questão FALHOU.

MÚLTIPLA ESCOLHA:
1. O enunciado foca num conceito, definição ou argumento específico do autor. Evite fatos triviais.
2. A resposta correta é a síntese exata do pensamento do autor.
3. Os distratores parecem teologicamente corretos, usam vocabulário bíblico e representam ideias populares que o texto NÃO abordou ou que o texto CORRIGIU.
4. As 4 alternativas têm tamanhos similares (diferença máxima de 5 palavras).
5. Nunca use "Todas as alternativas", "Nenhuma das alternativas" ou alternativas absurdas.
6. Distribua a posição da resposta correta entre A, B, C e D.

VERDADEIRO OU FALSO:
1. Nada de afirmações obviamente verdadeiras ou falsas.
2. Use uma armadilha de nuance: a afirmação parece verdadeira, mas contém um erro sutil, ou é uma ideia popular que o autor desconstruiu.
3. O booleano da resposta DEVE corresponder exatamente à verdade teológica da afirmação.

VERSÃO BÍBLICA:
Use EXCLUSIVAMENTE a versão ARA (Almeida Revista e Atualizada), com o texto exato.

ORTOGRAFIA:
Use português brasileiro correto com TODOS os acentos.

MEDITAÇÃO CRISTÃ:
Reflexão na Palavra, oração e aplicação prática. NÃO inclua técnicas de respiração, mindfulness ou esvaziamento mental.

{JSON_ONLY}"""


WEEK_STRUCTURE = """ESTRUTURA OBRIGATÓRIA DAS LIÇÕES - 3 ETAPAS:

ETAPA 1 - ESTUDE (stage: "estude"):
- Uma unidade "verse" com o VERSÍCULO BASE na ARA
- Uma unidade "text" para cada TÓPICO (título + texto explicativo, mínimo 150 palavras)
- Uma unidade "text" para a CONCLUSÃO
- NO MÍNIMO 6 telas nesta etapa

ETAPA 2 - MEDITE (stage: "medite"):
- NO MÍNIMO 3 unidades "reflection" ou "meditation" com aplicações práticas para a vida diária

ETAPA 3 - RESPONDA (stage: "responda"):
- EXATAMENTE 5 perguntas: misture "multiple_choice", "true_false" e "fill_blank"
- Apenas esta etapa causa perda de vidas quando o usuário erra

REGRAS PARA fill_blank:
- O campo "question" é uma frase COMPLETA com ___ no lugar da palavra a completar
- NUNCA gere apenas "___" ou "Complete: ___"
- Inclua "options" com EXATAMENTE 4 alternativas da mesma classe gramatical, todas coerentes com a frase
- "correctAnswer" é uma única palavra ou expressão curta, presente em "options"
- Exemplo: { "question": "Deus coopera em todas as coisas para o ___ daqueles que O amam.", "correctAnswer": "bem", "options": ["bem", "proveito", "benefício", "crescimento"] }"""


def build_weekly_study_prompt(text: str, week_number: int, year: int) -> Tuple[str, str]:
    """Build prompts for a full week of lessons from a source text"""

    user_prompt = f"""Transforme o seguinte texto em um conteúdo de estudo semanal (Semana {week_number} de {year}) para jovens da UMP.

TEXTO BASE:
{text}

Gere um JSON com a seguinte estrutura:
{{
  "weekTitle": "Título da semana baseado no tema principal",
  "weekDescription": "Descrição breve do conteúdo da semana",
  "lessons": [
    {{
      "title": "Título da lição",
      "description": "Descrição breve",
      "type": "intro|study|meditation|challenge|review",
      "xpReward": 10-50,
      "estimatedMinutes": 5-15,
      "units": [
        {{
          "type": "text|verse|meditation|reflection|multiple_choice|true_false|fill_blank",
          "stage": "estude|medite|responda",
          "content": {{
            // text / verse: {{ "title": "...", "body": "...", "highlight": "..." }}
            // meditation: {{ "title": "...", "body": "...", "meditationDuration": 60 }}
            // reflection: {{ "title": "...", "body": "...", "reflectionPrompt": "..." }}
            // multiple_choice: {{ "question": "...", "options": ["A", "B", "C", "D"], "correctIndex": 0-3, "explanationCorrect": "...", "explanationIncorrect": "...", "hint": "..." }}
            // true_false: {{ "statement": "...", "isTrue": true|false, "explanationCorrect": "...", "explanationIncorrect": "..." }}
            // fill_blank: {{ "question": "... ___ ...", "correctAnswer": "...", "options": ["...", "...", "...", "..."], "explanationCorrect": "...", "explanationIncorrect": "..." }}
          }},
          "xpValue": 2-10
        }}
      ]
    }}
  ]
}}

{WEEK_STRUCTURE}

REGRAS ADICIONAIS:
1. Crie 5 a 7 lições, uma para cada dia de estudo, com temas conectados
2. Cada lição segue as etapas na ordem ESTUDE -> MEDITE -> RESPONDA
3. As perguntas testam a compreensão do texto de leitura
4. O conteúdo deve ser edificante e encorajador

Retorne APENAS o JSON, sem explicações adicionais."""

    return ASSESSMENT_SYSTEM_PROMPT, user_prompt


def build_topic_exercises_prompt(topic: str, count: int = 5) -> Tuple[str, str]:
    """Build prompts for standalone exercises about a topic"""

    user_prompt = f"""Crie {count} exercícios variados sobre o tópico: "{topic}"

Retorne um JSON com a estrutura:
{{
  "exercises": [
    {{
      "type": "multiple_choice|true_false|fill_blank|reflection",
      "content": {{
        "question": "...",
        "options": ["Alternativa plausível A", "Alternativa plausível B", "Alternativa plausível C", "Alternativa plausível D"],
        "correctAnswer": 0-3,
        "explanation": "..."
      }},
      "xpValue": 5
    }}
  ]
}}

IMPORTANTE:
- Para múltipla escolha, todas as alternativas devem parecer razoáveis e relacionadas ao tema. VARIE a posição da resposta correta.
- Para fill_blank, INCLUA "options" com 4 alternativas da MESMA classe gramatical que fazem sentido na frase.
- Varie os tipos de exercícios.

Retorne APENAS o JSON, sem explicações adicionais."""

    return ASSESSMENT_SYSTEM_PROMPT, user_prompt


def build_practice_questions_prompt(
    week_title: str,
    week_description: str,
    existing_questions: List[str],
) -> Tuple[str, str]:
    """Build prompts for 10 new practice questions that avoid the existing ones"""

    existing_section = ""
    if existing_questions:
        existing_section = (
            "\n\nPERGUNTAS JÁ EXISTENTES (NÃO repita estas, crie perguntas NOVAS e DIFERENTES):\n"
            + "\n".join(existing_questions)
        )

    user_prompt = f"""Crie 10 perguntas de prática ÚNICAS sobre o tema: "{week_title}"
Descrição do tema: {week_description}{existing_section}

Retorne um JSON com a estrutura:
{{
  "questions": [
    {{
      "type": "multiple_choice",
      "content": {{ "question": "...", "options": ["A", "B", "C", "D"], "correctIndex": 0-3, "explanationCorrect": "...", "explanationIncorrect": "..." }}
    }},
    {{
      "type": "true_false",
      "content": {{ "statement": "...", "isTrue": true, "explanationCorrect": "...", "explanationIncorrect": "..." }}
    }},
    {{
      "type": "fill_blank",
      "content": {{ "question": "Jesus morreu para ___ o pecador.", "correctAnswer": "salvar", "options": ["salvar", "amar", "libertar", "redimir"], "explanationCorrect": "...", "explanationIncorrect": "..." }}
    }}
  ]
}}

REGRAS:
1. Crie exatamente 10 perguntas: 5 multiple_choice, 3 true_false, 2 fill_blank
2. Distribua as respostas corretas entre A, B, C e D
3. As perguntas devem ser DIFERENTES das já existentes
4. Foque no conteúdo do tema: {week_title}

Retorne APENAS o JSON, sem explicações adicionais."""

    return ASSESSMENT_SYSTEM_PROMPT, user_prompt


def build_reflection_questions_prompt(text: str, count: int = 3) -> Tuple[str, str]:
    system_prompt = f"""Você é um líder de jovens cristão. Crie perguntas de reflexão profundas baseadas no texto.
{JSON_ONLY}"""

    user_prompt = f"""Baseado no seguinte texto, crie {count} perguntas de reflexão para discussão em grupo:

{text}

Retorne um JSON: {{ "questions": ["pergunta1", "pergunta2", ...] }}

As perguntas devem:
1. Promover autoavaliação espiritual
2. Conectar o texto com a vida prática
3. Ser abertas (sem resposta certa ou errada)
4. Encorajar o compartilhamento de experiências

Retorne APENAS o JSON, sem explicações adicionais."""

    return system_prompt, user_prompt


def build_summary_prompt(text: str) -> Tuple[str, str]:
    system_prompt = "Você é um resumidor de textos cristão. Crie resumos claros e edificantes em português brasileiro."
    user_prompt = f"""Resuma o seguinte texto em 2-3 parágrafos, mantendo os pontos principais e a mensagem espiritual:

{text}"""
    return system_prompt, user_prompt


# Daily content prompts

DAY_NAMES = ["Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo"]


def build_recovery_verses_prompt(count: int = 5) -> Tuple[str, str]:
    system_prompt = "Você é um pastor experiente que consola pessoas em momentos difíceis."
    user_prompt = (
        f"Gere {count} versículos bíblicos de conforto (versão ARA) com reflexões breves. "
        'JSON: {"verses":[{"verse":"texto","reference":"Livro X:Y (ARA)","reflection":"reflexão"}]}'
    )
    return system_prompt, user_prompt


def build_daily_missions_prompt(day: date) -> Tuple[str, str]:
    system_prompt = "Você é um educador cristão criativo especializado em missões espirituais."
    user_prompt = f"""Crie 3 missões espirituais ÚNICAS e VARIADAS para {DAY_NAMES[day.weekday()]} ({day.isoformat()}).

REGRAS IMPORTANTES:
- As missões devem ser DIFERENTES a cada dia
- Use temas variados: oração, leitura bíblica, serviço, evangelismo, gratidão, louvor, jejum, meditação, comunhão
- Seja específico e criativo nos títulos e descrições
- Adapte ao dia da semana (domingo = culto, sábado = família, etc)

Formato JSON obrigatório:
{{
  "missions": [
    {{"title": "título curto", "description": "descrição detalhada da missão", "xpReward": 10, "type": "easy"}},
    {{"title": "título curto", "description": "descrição detalhada da missão", "xpReward": 25, "type": "medium"}},
    {{"title": "título curto", "description": "descrição detalhada da missão", "xpReward": 50, "type": "hard"}}
  ]
}}"""
    return system_prompt, user_prompt


def build_quiz_questions_prompt(count: int, day: date, seed: int) -> Tuple[str, str]:
    system_prompt = "Você é um especialista em estudos bíblicos e criador de quizzes."
    user_prompt = f"""Gere {count} perguntas de quiz ÚNICAS e VARIADAS sobre a Bíblia.

REGRAS IMPORTANTES:
- Data atual: {day.isoformat()} - as perguntas devem ser ÚNICAS para esta data
- Use o seed {seed} para garantir máxima variedade
- Cubra diferentes livros, personagens, eventos e temas, equilibrando Antigo e Novo Testamento
- Evite perguntas muito fáceis ou repetitivas
- Cada pergunta deve ter exatamente 4 opções
- Varie o correctIndex

Formato JSON (OBRIGATÓRIO):
{{
  "questions": [
    {{"question": "pergunta completa?", "options": ["opção1", "opção2", "opção3", "opção4"], "correctIndex": 0}}
  ]
}}"""
    return system_prompt, user_prompt


def build_bible_fact_prompt(day: date, seed: int) -> Tuple[str, str]:
    system_prompt = "Você é um historiador bíblico especializado."
    user_prompt = f"""Gere UMA curiosidade bíblica interessante e educativa.

REGRAS:
- A curiosidade deve ser ÚNICA e pouco conhecida
- Pode ser sobre: arqueologia, história, cultura, linguagem, geografia, personagens
- Deve ser precisa e baseada em fatos
- Use seed {seed} para variedade (data: {day.isoformat()})

Formato JSON:
{{
  "fact": "curiosidade interessante sobre a Bíblia",
  "category": "categoria (história/arqueologia/cultura/personagens/lugares/números)"
}}"""
    return system_prompt, user_prompt


def build_daily_verse_prompt(day: date) -> Tuple[str, str]:
    system_prompt = "Você é um pastor experiente."
    user_prompt = f"""Selecione um versículo bíblico inspirador e edificante para o dia de hoje (dia {day.timetuple().tm_yday} do ano).

Critérios:
- Deve ser um versículo real da Bíblia na versão ARA (Almeida Revista e Atualizada)
- Deve trazer esperança, encorajamento ou sabedoria
- Varie entre diferentes livros da Bíblia

Responda APENAS em formato JSON:
{{
  "verse": "Texto completo do versículo na versão ARA",
  "reference": "Livro Capítulo:Versículo (ARA)"
}}"""
    return system_prompt, user_prompt


def build_bible_character_prompt(day: date, seed: int) -> Tuple[str, str]:
    system_prompt = "Você é um estudioso bíblico especializado em personagens da Bíblia."
    user_prompt = f"""Gere informações sobre UM personagem bíblico para estudo diário.

REGRAS IMPORTANTES:
- Data atual: {day.isoformat()} - escolha um personagem ÚNICO para esta data
- Use o seed {seed} para garantir variedade
- Escolha entre TODOS os personagens bíblicos (Antigo e Novo Testamento)
- Inclua personagens menos conhecidos (não apenas Moisés, Davi, Abraão)
- Pode incluir: juízes, profetas menores, mulheres bíblicas, apóstolos, reis, etc.
- A descrição deve ser breve (1-2 frases)
- O versículo deve ser a referência mais importante sobre esse personagem
- O fato curioso deve ser algo interessante e educativo

Formato JSON (OBRIGATÓRIO):
{{
  "name": "Nome do personagem",
  "description": "Breve descrição do personagem e sua importância",
  "verse": "Referência bíblica (ex: Gênesis 12:1)",
  "fact": "Um fato curioso ou interessante sobre o personagem"
}}"""
    return system_prompt, user_prompt


def build_verse_memory_prompt(day: date, seed: int) -> Tuple[str, str]:
    system_prompt = "Você é um educador cristão especializado em memorização bíblica."
    user_prompt = f"""Gere um versículo para memorização com palavras para preencher.

REGRAS:
- Escolha um versículo DIFERENTE a cada dia (use seed {seed}, data: {day.isoformat()})
- Use versículos conhecidos e inspiradores
- Selecione 3-5 palavras-chave importantes para serem as lacunas
- As palavras devem ser significativas (substantivos, verbos, adjetivos importantes)
- Use a versão ARA (Almeida Revista e Atualizada)

Formato JSON:
{{
  "reference": "Livro capítulo:versículo (ex: João 3:16)",
  "fullVerse": "O versículo completo sem lacunas",
  "blanks": ["palavra1", "palavra2", "palavra3", "palavra4"]
}}"""
    return system_prompt, user_prompt


def build_timed_quiz_prompt(count: int, day: date, seed: int) -> Tuple[str, str]:
    system_prompt = "Você é um especialista em quizzes bíblicos rápidos e cronometrados."
    user_prompt = f"""Gere {count} perguntas RÁPIDAS e OBJETIVAS para um quiz cronometrado.

REGRAS IMPORTANTES:
- Data atual: {day.isoformat()} - as perguntas devem ser ÚNICAS para esta data
- Use o seed {seed} para garantir máxima variedade
- As perguntas devem ser SIMPLES e ter respostas DIRETAS
- Foque em fatos básicos: números, nomes, lugares, eventos, livros da Bíblia
- Cada pergunta deve poder ser respondida em menos de 5 segundos
- Cada pergunta deve ter exatamente 4 opções curtas
- A resposta correta NÃO deve ser sempre a opção 0 - varie o correctIndex

Formato JSON (OBRIGATÓRIO):
{{
  "questions": [
    {{"question": "Pergunta curta e direta?", "options": ["opção1", "opção2", "opção3", "opção4"], "correctIndex": 0}}
  ]
}}"""
    return system_prompt, user_prompt
