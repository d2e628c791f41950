# (c) Copyright Datacraft, 2026
from prometheus_client import Counter

PROVISIONING_TOTAL = Counter(
	"storeforge_provisioning_total",
	"Provisioning saga runs by outcome",
	["outcome"],
)

RECONCILIATION_TOTAL = Counter(
	"storeforge_reconciliation_total",
	"Stuck tenant reconciliation attempts by outcome",
	["outcome"],
)
