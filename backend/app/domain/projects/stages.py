from dataclasses import dataclass
from typing import Tuple

from app.domain.pricing.models import Modality, ServiceType

TERMINAL_STAGE_ID = "finalizado"


@dataclass(frozen=True)
class Stage:
    id: str
    name: str
    description: str


DECORATION_IN_PERSON_STAGES: Tuple[Stage, ...] = (
    Stage("formulario", "Formulário Pré-Briefing", "Cliente preenche questionário detalhado"),
    Stage("visita_tecnica", "Visita Técnica", "Levantamento no local"),
    Stage("reuniao_briefing", "Reunião de Briefing", "Alinhamento de expectativas"),
    Stage("desenvolvimento_3d", "Desenvolvimento Projeto 3D", "Criação do projeto 3D"),
    Stage("reuniao_3d", "Reunião Projeto 3D", "Apresentação do projeto 3D"),
    Stage("ajuste_3d", "Ajuste 3D", "Ajustes no projeto 3D"),
    Stage("aprovacao_3d", "Aprovação Projeto 3D", "Cliente aprova o 3D"),
    Stage("desenvolvimento_manual", "Desenvolvimento Manual", "Criação do manual de detalhamento"),
    Stage("reuniao_manual", "Reunião Manual", "Apresentação do manual de detalhamento"),
    Stage("ajuste_manual", "Ajustes Manual", "Ajustes no manual"),
    Stage("reuniao_final", "Reunião Final", "Alinhamento final antes da entrega"),
    Stage("entrega", "Entrega", "Entrega do projeto completo"),
    Stage("gerenciamento", "Gerenciamento", "Acompanhamento da execução"),
    Stage("montagem_final", "Montagem Final", "Montagem e finalização no local"),
    Stage("pesquisa_satisfacao", "Pesquisa de Satisfação", "Feedback do cliente"),
)

_IN_PERSON_ONLY = {"visita_tecnica", "gerenciamento", "montagem_final"}

DECORATION_ONLINE_STAGES: Tuple[Stage, ...] = tuple(
    stage for stage in DECORATION_IN_PERSON_STAGES if stage.id not in _IN_PERSON_ONLY
)

PRODUCTION_STAGES: Tuple[Stage, ...] = (
    Stage("pagamento", "Pagamento", "Cliente realiza o pagamento"),
    Stage("questionario_briefing", "Questionário Pré-Briefing", "Cliente preenche formulário com fotos"),
    Stage("reuniao_briefing", "Reunião de Briefing", "Alinhamento do que será feito"),
    Stage("dia_producao", "Dia de Produção", "Arquiteta finaliza tudo presencialmente"),
    Stage(TERMINAL_STAGE_ID, "Ambiente Finalizado", "Tudo pronto! Cliente só aproveita"),
)

DESIGN_STAGES: Tuple[Stage, ...] = (
    Stage("pagamento", "Pagamento", "Cliente realiza o pagamento"),
    Stage("questionario_briefing", "Questionário Pré-Briefing", "Cliente preenche formulário completo"),
    Stage("visita_medicao", "Visita Técnica + Medição", "Arquiteta analisa estrutura e faz medição"),
    Stage("reuniao_briefing", "Reunião de Briefing", "Alinhamento de escopo e prioridades"),
    Stage("desenvolvimento_3d", "Desenvolvimento Projeto 3D", "Projeto de interiores completo"),
    Stage("apresentacao_3d", "Reunião Apresentação 3D", "Apresentação e aprovação do 3D"),
    Stage("desenvolvimento_executivo", "Desenvolvimento Executivo", "Projetos técnicos: elétrica, hidráulica, forro"),
    Stage("entrega_executivo", "Reunião Entrega Executivo", "Apresentação dos projetos técnicos"),
    Stage("entrega_final", "Entrega Final", "Projeto 3D + Executivo + Manual + ART"),
)


def stages_for(service_type: ServiceType, modality: Modality = Modality.online) -> Tuple[Stage, ...]:
    if service_type == ServiceType.decoration:
        return DECORATION_IN_PERSON_STAGES if modality == Modality.in_person else DECORATION_ONLINE_STAGES
    if service_type == ServiceType.production:
        return PRODUCTION_STAGES
    return DESIGN_STAGES


def stage_index(stages: Tuple[Stage, ...], stage_id: str) -> int | None:
    for index, stage in enumerate(stages):
        if stage.id == stage_id:
            return index
    return None
