# dues/management/commands/recompute_ledgers.py

"""
Rebuild (or audit) the ledger snapshot stored on each Due.

USAGE EXAMPLES:
===============

# 1. Recompute every due
python manage.py recompute_ledgers

# 2. Recompute specific dues
python manage.py recompute_ledgers --due 12 --due 15

# 3. Only report drift; exits with an error if any due disagrees
python manage.py recompute_ledgers --check
"""

import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from dues.exceptions import LedgerDriftError
from dues.ledger import check_ledger, recompute_ledger
from dues.models import Due

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Recompute due ledgers from verified payment claims'

    def add_arguments(self, parser):
        parser.add_argument(
            '--due', action='append', type=int, dest='due_ids', default=[],
            help='Limit to this due id (repeatable)',
        )
        parser.add_argument(
            '--check', action='store_true',
            help='Report drift without writing anything',
        )

    def handle(self, *args, **options):
        due_ids = options['due_ids']
        qs = Due.objects.order_by('pk')
        if due_ids:
            qs = qs.filter(pk__in=due_ids)
            missing = set(due_ids) - set(qs.values_list('pk', flat=True))
            if missing:
                raise CommandError(f'Unknown due id(s): {", ".join(map(str, sorted(missing)))}')

        if options['check']:
            self._check(qs)
        else:
            self._recompute(qs)

    def _check(self, qs):
        drifted = 0
        for due in qs.iterator():
            try:
                check_ledger(due)
            except LedgerDriftError as exc:
                drifted += 1
                logger.error(exc.message)
                self.stderr.write(self.style.ERROR(exc.message))
        if drifted:
            raise CommandError(f'{drifted} due(s) have ledger drift; run without --check to rebuild.')
        self.stdout.write(self.style.SUCCESS('All ledgers match their verified claims.'))

    def _recompute(self, qs):
        count = 0
        for due_id in qs.values_list('pk', flat=True):
            with transaction.atomic():
                due = Due.objects.select_for_update().get(pk=due_id)
                snapshot = recompute_ledger(due)
            count += 1
            if snapshot.overpaid:
                self.stdout.write(self.style.WARNING(
                    f'Due {due_id}: overpaid by {snapshot.overpaid_amount}; reconcile manually.'
                ))
        logger.info('recomputed %s ledger(s)', count)
        self.stdout.write(self.style.SUCCESS(f'Recomputed {count} ledger(s).'))
