from dependency_injector import containers, providers

container = None

def setup_di_container_from_settings(settings=None):  # noqa: PLR0915
    """Inicializa o DI container após o Django já estar com settings carregados."""
    global container  # noqa: PLW0603
    if container is not None:
        import structlog
        structlog.get_logger().debug("DI container já inicializado.")
        return container

    # ------- IMPORTS DE INFRA E ADAPTERS -------
    import structlog
    from django.conf import settings as django_settings
    from django.utils import timezone

    from treatment_billing.adapters.observability.metrics import record_domain_event

    # Repositórios concretos (Django ORM)
    from treatment_billing.adapters.repositories import (
        DjangoUnitOfWork,
        PackageRepoImpl,
        PatientRepoImpl,
        SessionRepoImpl,
        TransactionRepoImpl,
    )

    # ------- IMPORTS DO CORE -------
    # Commands
    from treatment_billing.core.application.commands.package_commands import (
        CreatePackageCommand,
        DeletePackageCommand,
        RegenerateSessionsCommand,
        UpdatePackageCommand,
    )
    from treatment_billing.core.application.commands.patient_commands import (
        CreatePatientCommand,
        DeletePatientCommand,
        UpdatePatientCommand,
    )
    from treatment_billing.core.application.commands.payment_commands import (
        AddPaymentCommand,
        EditPaymentCommand,
        ReconcileLedgerCommand,
        RemovePaymentCommand,
    )
    from treatment_billing.core.application.commands.session_commands import (
        CompleteSessionCommand,
        MarkMissedSessionsCommand,
        RescheduleSessionCommand,
    )
    from treatment_billing.core.application.cqrs import CommandBusImpl, QueryBusImpl

    # Handlers
    from treatment_billing.core.application.handlers import (
        AddPaymentHandler,
        CompleteSessionHandler,
        CreatePackageHandler,
        CreatePatientHandler,
        DeletePackageHandler,
        DeletePatientHandler,
        EditPaymentHandler,
        GetLedgerSummaryHandler,
        GetPackageHandler,
        GetPatientHandler,
        ListAgendaHandler,
        ListDashboardPackagesHandler,
        ListPackageSessionsHandler,
        ListPackagesByPatientHandler,
        ListPackageTransactionsHandler,
        ListPatientsHandler,
        MarkMissedSessionsHandler,
        ReconcileLedgerHandler,
        RegenerateSessionsHandler,
        RemovePaymentHandler,
        RescheduleSessionHandler,
        UpdatePackageHandler,
        UpdatePatientHandler,
    )

    # Queries
    from treatment_billing.core.application.queries.package_queries import (
        GetLedgerSummaryQuery,
        GetPackageQuery,
        ListDashboardPackagesQuery,
        ListPackageSessionsQuery,
        ListPackagesByPatientQuery,
        ListPackageTransactionsQuery,
    )
    from treatment_billing.core.application.queries.patient_queries import GetPatientQuery, ListPatientsQuery
    from treatment_billing.core.application.queries.session_queries import ListAgendaQuery

    # Serviços
    from treatment_billing.core.application.services.cascade_deletion_service import CascadeDeletionService
    from treatment_billing.core.application.services.package_progress_service import PackageProgressService
    from treatment_billing.core.application.services.package_service import PackageSchedulingService
    from treatment_billing.core.application.services.payment_ledger_service import PaymentLedgerService
    from treatment_billing.core.application.services.session_service import SessionTransitionService
    from treatment_billing.core.domain.events.events import DomainEvent
    from treatment_billing.core.domain.repositories.unit_of_work import SequentialUnitOfWork
    from treatment_billing.core.domain.services.event_dispatcher import EventDispatcher, log_domain_event
    from treatment_billing.core.domain.services.session_state_machine import SessionStateMachine

    settings = settings or django_settings

    # ------- DECLARAÇÃO DO CONTAINER -------
    class Container(containers.DeclarativeContainer):
        config = providers.Configuration()

        # Infra
        logger = providers.Singleton(structlog.get_logger)
        event_dispatcher = providers.Singleton(EventDispatcher)

        # CQRS
        command_bus = providers.Singleton(CommandBusImpl, dispatcher=event_dispatcher)
        query_bus = providers.Singleton(QueryBusImpl)

        # Unidade de trabalho: atômica (Django) ou sequencial
        uow_factory = providers.Selector(
            config.ledger.uow,
            atomic=providers.Object(DjangoUnitOfWork),
            sequential=providers.Object(SequentialUnitOfWork),
        )

        # Implementações de Repositórios (Ports → Adapters)
        patient_repo = providers.Singleton(PatientRepoImpl)
        package_repo = providers.Singleton(PackageRepoImpl, lock_rows=config.ledger.lock_rows)
        session_repo = providers.Singleton(SessionRepoImpl)
        transaction_repo = providers.Singleton(TransactionRepoImpl)

        # Serviços de domínio / aplicação
        state_machine = providers.Singleton(SessionStateMachine, today=providers.Object(timezone.localdate))
        progress_service = providers.Singleton(
            PackageProgressService,
            package_repo=package_repo,
            session_repo=session_repo,
        )
        package_service = providers.Singleton(
            PackageSchedulingService,
            patient_repo=patient_repo,
            package_repo=package_repo,
            session_repo=session_repo,
            progress=progress_service,
            uow_factory=uow_factory,
        )
        session_service = providers.Singleton(
            SessionTransitionService,
            session_repo=session_repo,
            progress=progress_service,
            state_machine=state_machine,
            uow_factory=uow_factory,
        )
        ledger_service = providers.Singleton(
            PaymentLedgerService,
            package_repo=package_repo,
            transaction_repo=transaction_repo,
            uow_factory=uow_factory,
        )
        cascade_service = providers.Singleton(
            CascadeDeletionService,
            patient_repo=patient_repo,
            package_repo=package_repo,
            session_repo=session_repo,
            transaction_repo=transaction_repo,
            uow_factory=uow_factory,
        )

        # Handlers de pacientes
        create_patient_handler = providers.Factory(CreatePatientHandler, repo=patient_repo)
        update_patient_handler = providers.Factory(UpdatePatientHandler, repo=patient_repo)
        delete_patient_handler = providers.Factory(DeletePatientHandler, cascade=cascade_service)
        get_patient_handler = providers.Factory(GetPatientHandler, repo=patient_repo)
        list_patients_handler = providers.Factory(ListPatientsHandler, repo=patient_repo)

        # Handlers de pacotes
        create_package_handler = providers.Factory(CreatePackageHandler, service=package_service)
        update_package_handler = providers.Factory(UpdatePackageHandler, service=package_service)
        regenerate_sessions_handler = providers.Factory(RegenerateSessionsHandler, service=package_service)
        delete_package_handler = providers.Factory(DeletePackageHandler, cascade=cascade_service)
        get_package_handler = providers.Factory(GetPackageHandler, repo=package_repo, progress=progress_service)
        list_packages_by_patient_handler = providers.Factory(
            ListPackagesByPatientHandler, repo=package_repo, progress=progress_service
        )
        list_dashboard_packages_handler = providers.Factory(
            ListDashboardPackagesHandler,
            repo=package_repo,
            patient_repo=patient_repo,
            progress=progress_service,
        )
        list_package_sessions_handler = providers.Factory(
            ListPackageSessionsHandler, repo=package_repo, session_repo=session_repo
        )

        # Handlers de sessões
        reschedule_session_handler = providers.Factory(RescheduleSessionHandler, service=session_service)
        complete_session_handler = providers.Factory(CompleteSessionHandler, service=session_service)
        mark_missed_sessions_handler = providers.Factory(MarkMissedSessionsHandler, service=session_service)
        list_agenda_handler = providers.Factory(ListAgendaHandler, repo=session_repo)

        # Handlers do ledger
        add_payment_handler = providers.Factory(AddPaymentHandler, ledger=ledger_service)
        edit_payment_handler = providers.Factory(EditPaymentHandler, ledger=ledger_service)
        remove_payment_handler = providers.Factory(RemovePaymentHandler, ledger=ledger_service)
        reconcile_ledger_handler = providers.Factory(ReconcileLedgerHandler, ledger=ledger_service)
        get_ledger_summary_handler = providers.Factory(GetLedgerSummaryHandler, ledger=ledger_service)
        list_package_transactions_handler = providers.Factory(
            ListPackageTransactionsHandler, repo=package_repo, transaction_repo=transaction_repo
        )

        def init(self):
            # Assinantes padrão de eventos
            dispatcher = self.event_dispatcher()
            dispatcher.subscribe(DomainEvent, log_domain_event)
            dispatcher.subscribe(DomainEvent, record_domain_event)

            # Registrar comandos no CommandBus
            bus = self.command_bus()

            # Pacientes
            bus.register(CreatePatientCommand, self.create_patient_handler())
            bus.register(UpdatePatientCommand, self.update_patient_handler())
            bus.register(DeletePatientCommand, self.delete_patient_handler())

            # Pacotes / calendário
            bus.register(CreatePackageCommand, self.create_package_handler())
            bus.register(UpdatePackageCommand, self.update_package_handler())
            bus.register(RegenerateSessionsCommand, self.regenerate_sessions_handler())
            bus.register(DeletePackageCommand, self.delete_package_handler())

            # Sessões
            bus.register(RescheduleSessionCommand, self.reschedule_session_handler())
            bus.register(CompleteSessionCommand, self.complete_session_handler())
            bus.register(MarkMissedSessionsCommand, self.mark_missed_sessions_handler())

            # Ledger
            bus.register(AddPaymentCommand, self.add_payment_handler())
            bus.register(EditPaymentCommand, self.edit_payment_handler())
            bus.register(RemovePaymentCommand, self.remove_payment_handler())
            bus.register(ReconcileLedgerCommand, self.reconcile_ledger_handler())

            # Registrar queries no QueryBus
            qb = self.query_bus()
            qb.register(GetPatientQuery, self.get_patient_handler())
            qb.register(ListPatientsQuery, self.list_patients_handler())
            qb.register(GetPackageQuery, self.get_package_handler())
            qb.register(ListPackagesByPatientQuery, self.list_packages_by_patient_handler())
            qb.register(ListDashboardPackagesQuery, self.list_dashboard_packages_handler())
            qb.register(ListPackageSessionsQuery, self.list_package_sessions_handler())
            qb.register(ListPackageTransactionsQuery, self.list_package_transactions_handler())
            qb.register(GetLedgerSummaryQuery, self.get_ledger_summary_handler())
            qb.register(ListAgendaQuery, self.list_agenda_handler())

    # ------- INSTANCIAÇÃO E CONFIG -------
    container = Container()
    container.config.ledger.uow.from_value(
        "atomic" if getattr(settings, "ATOMIC_LEDGER_WRITES", True) else "sequential"
    )
    container.config.ledger.lock_rows.from_value(getattr(settings, "PAYMENT_LOCK_ROWS", True))

    # Inicializa os buses com todos os handlers
    Container.init(container)
    return container
